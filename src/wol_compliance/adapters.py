"""
OS network-adapter wake power management.

Windows exposes the "Allow this device to wake the computer" flag through
the MSPower_DeviceWakeEnable WMI class (root\\wmi). The class covers every
wake-capable device, so entries are matched to physical network adapters
by PnP device ID.
"""

import logging
from typing import List

from .exceptions import OSAdapterEnumerationFailure, OSAdapterSetFailure, PowerShellError
from .models import ItemOutcome, NetworkAdapter
from .powershell import PowerShellRunner, as_list, ps_quote

logger = logging.getLogger(__name__)


class AdapterPowerController:
    """List network adapters and set their wake-enable flag."""

    LIST_SCRIPT = r'''
$nics = @(Get-NetAdapter -Physical | Select-Object Name, PnPDeviceID)
$items = @(Get-CimInstance -Namespace root\wmi -ClassName MSPower_DeviceWakeEnable | ForEach-Object {
    $wake = $_
    $nic = $nics | Where-Object { $wake.InstanceName.StartsWith($_.PnPDeviceID, 'OrdinalIgnoreCase') } | Select-Object -First 1
    if ($nic) {
        @{ Name = [string]$nic.Name; InstanceName = [string]$wake.InstanceName; Enable = [bool]$wake.Enable }
    }
})
ConvertTo-Json -InputObject $items -Compress
'''

    ENABLE_SCRIPT = r'''
$inst = Get-CimInstance -Namespace root\wmi -ClassName MSPower_DeviceWakeEnable |
    Where-Object {{ $_.InstanceName -eq {instance} }}
if (-not $inst) {{ throw "Wake power setting not found" }}
Set-CimInstance -InputObject $inst -Property @{{ Enable = $true }}
@{{ Success = $true }} | ConvertTo-Json -Compress
'''

    def __init__(self, runner: PowerShellRunner):
        self.runner = runner

    def list_adapters(self) -> List[NetworkAdapter]:
        """
        Enumerate wake-capable network adapters in OS order.

        Raises:
            OSAdapterEnumerationFailure: If the WMI query fails
        """
        try:
            parsed = as_list(self.runner.run_json(self.LIST_SCRIPT))
        except PowerShellError as e:
            raise OSAdapterEnumerationFailure(f"Unable to list adapter power settings: {e}") from e

        adapters = []
        for entry in parsed:
            if not isinstance(entry, dict):
                continue
            instance = entry.get("InstanceName") or ""
            adapters.append(NetworkAdapter(
                identifier=entry.get("Name") or instance,
                wake_enabled=bool(entry.get("Enable")),
                instance_name=instance,
            ))
        return adapters

    def enable_wake(self, adapter: NetworkAdapter) -> ItemOutcome:
        """Set the wake-enable flag on one adapter. Never raises."""
        instance = adapter.instance_name or adapter.identifier
        try:
            self.runner.run_json(self.ENABLE_SCRIPT.format(instance=ps_quote(instance)))
        except PowerShellError as e:
            failure = OSAdapterSetFailure(adapter.identifier, str(e))
            logger.warning(str(failure))
            return ItemOutcome(adapter.identifier, False, failure.reason)

        adapter.wake_enabled = True
        return ItemOutcome(adapter.identifier, True, "Wake enabled")


def non_compliant(adapters: List[NetworkAdapter]) -> List[NetworkAdapter]:
    """Adapters whose wake-enable flag is off."""
    return [a for a in adapters if not a.wake_enabled]
