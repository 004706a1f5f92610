"""
Single source of truth for shared types in wol-compliance.

IMPORTANT: Import enums from this module, not from individual files.

Usage:
    from wol_compliance._types import (
        Manufacturer, Severity, Mode, MergePolicy,
        classify_manufacturer,
    )
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional


# =============================================================================
# ENUMS
# =============================================================================


class Manufacturer(str, Enum):
    """Hardware vendors with a firmware configuration channel."""
    DELL = "Dell"
    HP = "HP"
    LENOVO = "Lenovo"
    UNSUPPORTED = "Unsupported"


class Severity(IntEnum):
    """
    Severity codes reported to the orchestrator.

    The numeric values are the contract; do not renumber.
    """
    COMPLIANT = 0
    WARNING = 1
    ERROR = -1
    UNSUPPORTED = -2


class Mode(str, Enum):
    """Invocation mode."""
    DETECT = "detect"
    REMEDIATE = "remediate"


class MergePolicy(str, Enum):
    """
    How tier severities combine into the overall status.

    - most_severe: WARNING > ERROR > UNSUPPORTED > COMPLIANT
    - last_write: whichever tier failure occurred last wins (legacy)
    """
    MOST_SEVERE = "most_severe"
    LAST_WRITE = "last_write"


# Higher rank wins under MergePolicy.MOST_SEVERE
SEVERITY_RANK = {
    Severity.COMPLIANT: 0,
    Severity.UNSUPPORTED: 1,
    Severity.ERROR: 2,
    Severity.WARNING: 3,
}


# =============================================================================
# CLASSIFICATION
# =============================================================================


def classify_manufacturer(raw: Optional[str]) -> Manufacturer:
    """
    Resolve a system-identity manufacturer string to a Manufacturer.

    Matching is a case-insensitive substring test, in order:
    Dell, then HP/Hewlett, then Lenovo.
    """
    value = (raw or "").lower()

    if "dell" in value:
        return Manufacturer.DELL
    if "hp" in value or "hewlett" in value:
        return Manufacturer.HP
    if "lenovo" in value:
        return Manufacturer.LENOVO
    return Manufacturer.UNSUPPORTED


def merge_severity(
    current: Severity,
    incoming: Optional[Severity],
    policy: MergePolicy,
) -> Severity:
    """Fold one tier's severity into the running overall status."""
    if incoming is None or incoming == Severity.COMPLIANT:
        return current

    if policy == MergePolicy.LAST_WRITE:
        return incoming

    if SEVERITY_RANK[incoming] > SEVERITY_RANK[current]:
        return incoming
    return current
