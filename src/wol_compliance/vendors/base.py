"""
Vendor capability provider base class.

A provider reads and writes the firmware Wake-on-LAN setting through
one vendor-specific channel. Providers are built with the result of the
pre-flight provisioning check; they never install anything themselves.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .._types import Manufacturer
from ..models import FirmwareSetting, ItemOutcome
from ..powershell import PowerShellRunner
from ..provisioning import ModuleRequirement, ProvisioningResult, ProvisioningStatus

logger = logging.getLogger(__name__)


class VendorProvider(ABC):
    """Abstract firmware channel for one manufacturer."""

    manufacturer: Manufacturer = Manufacturer.UNSUPPORTED
    requirements: Tuple[ModuleRequirement, ...] = ()

    def __init__(
        self,
        runner: PowerShellRunner,
        capability: Optional[ProvisioningResult] = None,
    ):
        self.runner = runner
        self.capability = capability or ProvisioningResult(status=ProvisioningStatus.AVAILABLE)

    @property
    def ready(self) -> bool:
        return self.capability.ready

    @abstractmethod
    def detect(self) -> FirmwareSetting:
        """
        Read the current firmware setting.

        Raises:
            FirmwareReadFailure: If the vendor channel cannot be read
        """
        pass

    @abstractmethod
    def remediate(self) -> List[ItemOutcome]:
        """
        Write the compliant firmware value.

        Returns:
            One ItemOutcome per setting written

        Raises:
            FirmwareWriteFailure: If the vendor channel rejects the write outright
        """
        pass

    def describe(self, setting: FirmwareSetting) -> str:
        """Trace line for a detected setting."""
        if setting.raw_value is None:
            return f"{self.manufacturer.value} WoL setting not found."
        return f"{self.manufacturer.value} WoL value: {setting.raw_value}."
