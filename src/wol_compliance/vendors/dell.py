"""
Dell firmware channel via the DellBIOSProvider PowerShell module.

The module exposes BIOS attributes as a PowerShell drive (DellSmbios:).
"""

import logging
from typing import List

from .._types import Manufacturer
from ..exceptions import FirmwareReadFailure, FirmwareWriteFailure, PowerShellError
from ..models import FirmwareSetting, ItemOutcome
from ..powershell import as_object, ps_quote
from ..provisioning import ModuleRequirement
from .base import VendorProvider

logger = logging.getLogger(__name__)

WOL_PATH = r"DellSmbios:\PowerManagement\WakeOnLan"

# Read check and write value differ in casing. Do not unify.
COMPLIANT_VALUE = "LanOnly"
REMEDIATION_VALUE = "LANOnly"


class DellProvider(VendorProvider):
    """Dell BIOS Wake-on-LAN via DellSmbios:."""

    manufacturer = Manufacturer.DELL
    requirements = (ModuleRequirement("DellBIOSProvider"),)

    DETECT_SCRIPT = r'''
Import-Module DellBIOSProvider
$item = Get-Item -Path {path}
@{{ Value = [string]$item.CurrentValue }} | ConvertTo-Json -Compress
'''

    REMEDIATE_SCRIPT = r'''
Import-Module DellBIOSProvider
Set-Item -Path {path} -Value {value}
@{{ Success = $true }} | ConvertTo-Json -Compress
'''

    def detect(self) -> FirmwareSetting:
        try:
            parsed = as_object(self.runner.run_json(self.DETECT_SCRIPT.format(path=ps_quote(WOL_PATH))))
        except PowerShellError as e:
            raise FirmwareReadFailure(f"Unable to read {WOL_PATH}: {e}") from e

        value = parsed.get("Value")
        return FirmwareSetting(
            name="WakeOnLan",
            raw_value=value,
            is_compliant=value == COMPLIANT_VALUE,
        )

    def remediate(self) -> List[ItemOutcome]:
        script = self.REMEDIATE_SCRIPT.format(
            path=ps_quote(WOL_PATH),
            value=ps_quote(REMEDIATION_VALUE),
        )
        try:
            self.runner.run_json(script)
        except PowerShellError as e:
            raise FirmwareWriteFailure(f"Unable to set {WOL_PATH} to {REMEDIATION_VALUE}: {e}") from e

        return [ItemOutcome("WakeOnLan", True, f"Set to {REMEDIATION_VALUE}")]
