"""
Data models for the Wake-on-LAN compliance checker.

Value records (firmware settings, adapters, per-item outcomes) are plain
dataclasses. The aggregate result handed to the invocation shell is a
pydantic model so it can be dumped for audit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from ._types import Manufacturer, Mode, Severity

logger = logging.getLogger(__name__)


# ============================================================================
# Value Records
# ============================================================================


@dataclass
class FirmwareSetting:
    """Vendor-reported Wake-on-LAN firmware value."""
    name: str
    raw_value: Optional[str]
    is_compliant: bool


@dataclass
class NetworkAdapter:
    """OS-visible network adapter that supports wake power management."""
    identifier: str
    wake_enabled: bool
    instance_name: str = ""  # MSPower_DeviceWakeEnable key


@dataclass
class ItemOutcome:
    """Result of one remediation action within a loop."""
    item: str
    success: bool
    message: str = ""


# ============================================================================
# Result Models
# ============================================================================


class TierResult(BaseModel):
    """Outcome of a single evaluation tier."""

    tier: str = Field(
        ...,
        description="Tier name (provisioning, firmware, os)"
    )
    severity: Optional[Severity] = Field(
        default=None,
        description="Severity set by this tier; None when the tier set nothing"
    )
    summary: str = Field(
        default="",
        description="Short human-readable state"
    )
    outcomes: List[ItemOutcome] = Field(
        default_factory=list,
        description="Per-item remediation outcomes"
    )

    @property
    def failed_items(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if not o.success]


class ComplianceResult(BaseModel):
    """
    Aggregate result of one detect or remediate run.

    The trace is append-only and reflects evaluation order:
    dependency checks, then vendor checks, then OS checks.
    """

    mode: Mode
    manufacturer: Manufacturer = Manufacturer.UNSUPPORTED
    manufacturer_raw: str = ""
    status: Severity = Severity.COMPLIANT
    firmware_state: str = ""
    os_state: str = ""
    tiers: List[TierResult] = Field(default_factory=list)
    trace: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def log(self, line: str) -> None:
        """Append a line to the trace and mirror it to the log."""
        self.trace.append(line)
        logger.info(line)

    def tier(self, name: str) -> Optional[TierResult]:
        """Look up a recorded tier by name."""
        for tier in self.tiers:
            if tier.tier == name:
                return tier
        return None

    @property
    def is_compliant(self) -> bool:
        return self.status == Severity.COMPLIANT
