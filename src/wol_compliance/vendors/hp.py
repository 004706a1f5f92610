"""
HP firmware channel via the HP Client Management Script Library (HPCMSL).

HP firmware can expose several Wake On Lan settings (one per NIC or
power state), so the provider works on every matching setting.
"""

import logging
from typing import Dict, List

from .._types import Manufacturer
from ..exceptions import FirmwareReadFailure, FirmwareWriteFailure, PowerShellError
from ..models import FirmwareSetting, ItemOutcome
from ..powershell import as_list, ps_quote
from ..provisioning import ModuleRequirement
from .base import VendorProvider

logger = logging.getLogger(__name__)

SETTING_PATTERN = "Wake On Lan"
REMEDIATION_VALUE = "Boot to Hard Drive"


class HPProvider(VendorProvider):
    """HP BIOS Wake-on-LAN via HPCMSL cmdlets."""

    manufacturer = Manufacturer.HP
    requirements = (ModuleRequirement("HPCMSL", needs_current_powershellget=True),)

    LIST_SCRIPT = r'''
Import-Module HP.ClientManagement
$settings = Get-HPBIOSSettingsList | Where-Object { $_.Name -like '*Wake On Lan*' }
$out = @(foreach ($s in $settings) {
    @{ Name = [string]$s.Name; Value = [string](Get-HPBIOSSettingValue -Name $s.Name) }
})
ConvertTo-Json -InputObject $out -Compress
'''

    SET_SCRIPT = r'''
Import-Module HP.ClientManagement
Set-HPBIOSSettingValue -Name {name} -Value {value}
@{{ Success = $true }} | ConvertTo-Json -Compress
'''

    def __init__(self, runner, capability=None, strict: bool = False):
        super().__init__(runner, capability)
        self.strict = strict

    def list_settings(self) -> Dict[str, str]:
        """Map of matching setting name to current value, in firmware order."""
        try:
            parsed = as_list(self.runner.run_json(self.LIST_SCRIPT))
        except PowerShellError as e:
            raise FirmwareReadFailure(f"Unable to read HP BIOS settings: {e}") from e

        settings = {}
        for entry in parsed:
            if not isinstance(entry, dict):
                continue
            name = entry.get("Name") or ""
            if SETTING_PATTERN.lower() in name.lower():
                settings[name] = entry.get("Value") or ""
        return settings

    def detect(self) -> FirmwareSetting:
        settings = self.list_settings()

        if not settings:
            return FirmwareSetting(name=SETTING_PATTERN, raw_value=None, is_compliant=not self.strict)

        # Without strict mode a successful read is the only check applied.
        compliant = True
        if self.strict:
            compliant = all(v == REMEDIATION_VALUE for v in settings.values())

        raw = "; ".join(f"{name}: {value}" for name, value in settings.items())
        return FirmwareSetting(name=SETTING_PATTERN, raw_value=raw, is_compliant=compliant)

    def remediate(self) -> List[ItemOutcome]:
        try:
            names = list(self.list_settings())
        except FirmwareReadFailure as e:
            raise FirmwareWriteFailure(str(e)) from e

        outcomes = []
        for name in names:
            script = self.SET_SCRIPT.format(name=ps_quote(name), value=ps_quote(REMEDIATION_VALUE))
            try:
                self.runner.run_json(script)
            except PowerShellError as e:
                logger.warning(f"Failed to set HP setting {name}: {e}")
                outcomes.append(ItemOutcome(name, False, str(e)))
                continue
            outcomes.append(ItemOutcome(name, True, f"Set to {REMEDIATION_VALUE}"))

        return outcomes
