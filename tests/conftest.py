"""
Shared fixtures.

FakePowerShell answers scripts by substring so no real PowerShell, WMI,
or vendor module is needed. Later registrations win, so tests can start
from a healthy machine and override one answer.
"""

import json

import pytest

from wol_compliance.config import CheckerConfig
from wol_compliance.powershell import PowerShellResult, PowerShellRunner


class FakePowerShell(PowerShellRunner):
    """Scripted PowerShellRunner."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def on(self, marker, data=None, status_code=0, stderr=""):
        """Answer scripts containing marker with data as JSON."""
        std_out = "" if data is None else json.dumps(data)
        self.responses.append((marker, PowerShellResult(status_code, std_out, stderr)))
        return self

    def fail(self, marker, stderr="Access denied", status_code=1):
        """Make scripts containing marker exit non-zero."""
        self.responses.append((marker, PowerShellResult(status_code, "", stderr)))
        return self

    def run(self, script):
        self.calls.append(script)
        for marker, result in reversed(self.responses):
            if marker in script:
                return result
        raise AssertionError(f"Unexpected script: {script.strip()[:120]}")

    def called(self, marker):
        """Number of scripts run that contained marker."""
        return sum(1 for s in self.calls if marker in s)


def healthy_machine(manufacturer="Dell Inc."):
    """FakePowerShell for a compliant machine of the given make."""
    fake = FakePowerShell()
    fake.on("Win32_ComputerSystem", {"Manufacturer": manufacturer})

    # Provisioning
    fake.on("Get-PackageProvider", {"Installed": True, "Version": "2.8.5.208"})
    fake.on("Get-Module -ListAvailable -Name 'DellBIOSProvider'", {"Installed": True, "Version": "2.7.2"})
    fake.on("Get-Module -ListAvailable -Name 'PowerShellGet'", {"Installed": True, "Version": "2.2.5"})
    fake.on("Get-Module -ListAvailable -Name 'HPCMSL'", {"Installed": True, "Version": "1.7.2"})

    # Firmware
    fake.on("Get-Item -Path", {"Value": "LanOnly"})
    fake.on("Set-Item -Path", {"Success": True})
    fake.on("Get-HPBIOSSettingsList", [
        {"Name": "Wake On LAN", "Value": "Boot to Hard Drive"},
    ])
    fake.on("Set-HPBIOSSettingValue", {"Success": True})
    fake.on("Lenovo_BiosSetting", [
        "WakeOnLANDock,Enable;[Optional:Disable,Enable]",
        "Wake on LAN,Primary;[Optional:Disable,Primary,Automatic]",
    ])
    fake.on("Lenovo_SetBiosSetting", {"Return": "Success"})
    fake.on("SaveBiosSettings", {"Return": "Success"})

    # OS adapters
    fake.on("Get-NetAdapter", [
        {"Name": "Ethernet", "InstanceName": "PCI\\VEN_8086&DEV_15F3\\0_0", "Enable": True},
    ])
    fake.on("Set-CimInstance", {"Success": True})
    return fake


@pytest.fixture
def config():
    """Default configuration."""
    return CheckerConfig()


@pytest.fixture
def fake_ps():
    """Healthy Dell machine."""
    return healthy_machine()
