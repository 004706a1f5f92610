"""
Lenovo firmware channel via the Lenovo WMI BIOS interface (root\\wmi).

Settings come back as "<label>,<value>" strings where the value part is a
semicolon-delimited tuple, e.g. "Wake on LAN,Primary;[Optional:...]".
Writes are a set-then-save pair; nothing takes effect until save.
"""

import logging
from typing import List, Optional, Tuple

from .._types import Manufacturer
from ..exceptions import FirmwareReadFailure, FirmwareWriteFailure, PowerShellError
from ..models import FirmwareSetting, ItemOutcome
from ..powershell import as_list, as_object, ps_quote
from .base import VendorProvider

logger = logging.getLogger(__name__)

# Firmware may report the label in other casings, e.g. "Wake on LAN".
# Reads match it case-insensitively; writes send this spelling verbatim
# without reading the reported casing first.
SETTING_LABEL = "Wake on lan"
COMPLIANT_VALUE = "Primary"


def parse_setting(entry: str) -> Tuple[str, List[str]]:
    """Split a CurrentSetting string into (label, value tuple)."""
    label, _, value = entry.partition(",")
    return label.strip(), [part.strip() for part in value.split(";")]


def find_setting(entries: List[str], label: str = SETTING_LABEL) -> Optional[Tuple[str, List[str]]]:
    """Locate the entry whose label matches, case-insensitively."""
    for entry in entries:
        found_label, values = parse_setting(entry)
        if found_label.casefold() == label.casefold():
            return found_label, values
    return None


class LenovoProvider(VendorProvider):
    """Lenovo BIOS Wake-on-LAN via WMI."""

    manufacturer = Manufacturer.LENOVO
    requirements = ()

    READ_SCRIPT = r'''
$settings = @(Get-WmiObject -Namespace root\wmi -Class Lenovo_BiosSetting |
    Where-Object { $_.CurrentSetting -ne '' } |
    ForEach-Object { [string]$_.CurrentSetting })
ConvertTo-Json -InputObject $settings -Compress
'''

    SET_SCRIPT = r'''
$r = (Get-WmiObject -Namespace root\wmi -Class Lenovo_SetBiosSetting).SetBiosSetting({setting})
@{{ Return = [string]$r.return }} | ConvertTo-Json -Compress
'''

    SAVE_SCRIPT = r'''
$r = (Get-WmiObject -Namespace root\wmi -Class Lenovo_SaveBiosSettings).SaveBiosSettings()
@{ Return = [string]$r.return } | ConvertTo-Json -Compress
'''

    def read_settings(self) -> List[str]:
        try:
            return [str(s) for s in as_list(self.runner.run_json(self.READ_SCRIPT))]
        except PowerShellError as e:
            raise FirmwareReadFailure(f"Unable to read Lenovo_BiosSetting: {e}") from e

    def detect(self) -> FirmwareSetting:
        found = find_setting(self.read_settings())

        if found is None:
            return FirmwareSetting(name=SETTING_LABEL, raw_value=None, is_compliant=False)

        label, values = found
        return FirmwareSetting(
            name=label,
            raw_value=";".join(values),
            is_compliant=bool(values) and values[0] == COMPLIANT_VALUE,
        )

    def remediate(self) -> List[ItemOutcome]:
        setting = f"{SETTING_LABEL},{COMPLIANT_VALUE}"

        self._call("SetBiosSetting", self.SET_SCRIPT.format(setting=ps_quote(setting)))
        self._call("SaveBiosSettings", self.SAVE_SCRIPT)

        return [ItemOutcome(SETTING_LABEL, True, f"Set to {COMPLIANT_VALUE} and saved")]

    def _call(self, method: str, script: str) -> None:
        try:
            parsed = as_object(self.runner.run_json(script))
        except PowerShellError as e:
            raise FirmwareWriteFailure(f"{method} failed: {e}") from e

        returned = parsed.get("Return", "")
        if returned != "Success":
            raise FirmwareWriteFailure(f"{method} returned {returned or 'nothing'}")
