"""
Tests for the compliance evaluator.

Covers tier ordering, severity merge policies, and the detect/remediate
scenarios the orchestrator depends on.
"""

import pytest

from wol_compliance._types import Manufacturer, MergePolicy, Mode, Severity
from wol_compliance.config import CheckerConfig
from wol_compliance.evaluator import ComplianceEvaluator

from conftest import healthy_machine


WIFI_OFF = {"Name": "Wi-Fi", "InstanceName": "PCI\\VEN_8086&DEV_2723_0", "Enable": False}
ETHERNET_ON = {"Name": "Ethernet", "InstanceName": "PCI\\VEN_8086&DEV_15F3_0", "Enable": True}


def evaluate(fake, mode=Mode.DETECT, **config):
    return ComplianceEvaluator(CheckerConfig(**config), fake).run(mode)


# =============================================================================
# DETECT SCENARIOS
# =============================================================================

class TestDetectScenarios:

    def test_dell_compliant(self):
        result = evaluate(healthy_machine("Dell Inc."))

        assert result.status == Severity.COMPLIANT
        assert result.manufacturer == Manufacturer.DELL
        assert "LanOnly" in result.firmware_state
        assert "Dell system." in result.trace
        assert "Dell WoL value: LanOnly." in result.trace

    def test_dell_misconfigured_is_warning(self):
        fake = healthy_machine("Dell Inc.").on("Get-Item -Path", {"Value": "Disabled"})
        result = evaluate(fake)

        assert result.status == Severity.WARNING
        assert result.tier("firmware").severity == Severity.WARNING

    def test_dell_read_failure_is_error_and_os_tier_runs(self):
        fake = healthy_machine("Dell Inc.").fail("Get-Item -Path")
        result = evaluate(fake)

        assert result.status == Severity.ERROR
        assert result.tier("os") is not None
        assert fake.called("Get-NetAdapter") == 1

    def test_unsupported_manufacturer(self):
        fake = healthy_machine("Acer")
        result = evaluate(fake)

        assert result.status == Severity.UNSUPPORTED
        assert "Acer not supported by script." in result.trace
        assert result.firmware_state == "Unsupported"
        # OS tier still evaluated; no provisioning attempted
        assert result.tier("os").severity == Severity.COMPLIANT
        assert fake.called("Get-PackageProvider") == 0

    def test_lenovo_missing_entry_does_not_change_status(self):
        fake = healthy_machine("LENOVO").on("Lenovo_BiosSetting", ["SecureBoot,Enable"])
        result = evaluate(fake)

        assert result.tier("firmware").severity is None
        assert result.status == Severity.COMPLIANT
        assert "Lenovo WoL setting not found." in result.trace

    def test_lenovo_needs_no_provisioning(self):
        fake = healthy_machine("LENOVO")
        result = evaluate(fake)

        assert result.status == Severity.COMPLIANT
        assert fake.called("Get-PackageProvider") == 0

    def test_hp_read_success_is_compliant(self):
        fake = healthy_machine("HP").on("Get-HPBIOSSettingsList", [{"Name": "Wake On LAN", "Value": "Disable"}])
        result = evaluate(fake)
        assert result.tier("firmware").severity == Severity.COMPLIANT

    def test_hp_strict_mode(self):
        fake = healthy_machine("HP").on("Get-HPBIOSSettingsList", [{"Name": "Wake On LAN", "Value": "Disable"}])
        result = evaluate(fake, hp_strict=True)
        assert result.status == Severity.WARNING

    def test_adapter_with_wake_disabled(self):
        fake = healthy_machine().on("Get-NetAdapter", [ETHERNET_ON, WIFI_OFF])
        result = evaluate(fake)

        assert result.status == Severity.WARNING
        assert result.tier("os").severity == Severity.WARNING
        assert "Wake disabled on adapter: Wi-Fi" in result.trace
        assert not any("Ethernet" in line and "disabled" in line for line in result.trace)

    def test_zero_adapters_is_compliant(self):
        fake = healthy_machine().on("Get-NetAdapter", [])
        result = evaluate(fake)

        assert result.tier("os").severity == Severity.COMPLIANT
        assert result.status == Severity.COMPLIANT

    def test_adapter_enumeration_failure(self):
        fake = healthy_machine().fail("Get-NetAdapter")
        result = evaluate(fake)

        assert result.status == Severity.ERROR
        assert result.os_state == "Enumeration failed"

    def test_identity_failure_still_runs_os_tier(self):
        fake = healthy_machine().fail("Win32_ComputerSystem")
        result = evaluate(fake)

        assert result.status == Severity.ERROR
        assert result.tier("os") is not None

    def test_identity_non_object_output_is_error(self):
        fake = healthy_machine().on("Win32_ComputerSystem", "Dell Inc.")
        result = evaluate(fake)

        assert result.status == Severity.ERROR
        assert result.firmware_state == "Unknown"
        assert result.tier("os") is not None

    def test_blank_manufacturer_is_unsupported(self):
        result = evaluate(healthy_machine(""))

        assert result.status == Severity.UNSUPPORTED
        assert "Unknown manufacturer not supported by script." in result.trace


# =============================================================================
# TRACE ORDER
# =============================================================================

class TestTraceOrder:

    def test_dependency_then_vendor_then_os(self):
        result = evaluate(healthy_machine("Dell Inc."))

        dep = result.trace.index("DellBIOSProvider module found.")
        vendor = result.trace.index("Dell system.")
        os_line = next(i for i, line in enumerate(result.trace) if "network adapter" in line)
        assert dep < vendor < os_line

    def test_tiers_recorded_in_order(self):
        result = evaluate(healthy_machine("Dell Inc."))
        assert [t.tier for t in result.tiers] == ["provisioning", "firmware", "os"]


# =============================================================================
# PROVISIONING
# =============================================================================

class TestProvisioningTier:

    def test_failure_skips_vendor_call(self):
        fake = healthy_machine("Dell Inc.")
        fake.on("Get-Module -ListAvailable -Name 'DellBIOSProvider'", {"Installed": False})
        fake.fail("Install-Module", stderr="Unable to resolve package source")

        result = evaluate(fake)

        assert result.status == Severity.ERROR
        assert fake.called("Get-Item -Path") == 0
        assert result.firmware_state == "Not checked"
        assert result.tier("os") is not None

    def test_rerun_required_is_warning(self):
        fake = healthy_machine("HP")
        fake.on("Get-Module -ListAvailable -Name 'PowerShellGet'", {"Installed": True, "Version": "1.0.0.1"})
        fake.on("Install-Module", {"Installed": True})

        result = evaluate(fake)

        assert result.status == Severity.WARNING
        assert fake.called("Get-HPBIOSSettingsList") == 0
        assert "Dependencies were updated. Rerun to check firmware settings." in result.trace
        assert result.tier("os") is not None

    def test_install_then_check(self):
        fake = healthy_machine("Dell Inc.")
        fake.on("Get-Module -ListAvailable -Name 'DellBIOSProvider'", {"Installed": False})
        fake.on("Install-Module", {"Installed": True})

        result = evaluate(fake)

        assert result.status == Severity.COMPLIANT
        assert "DellBIOSProvider module installed." in result.trace
        assert result.tier("provisioning").summary == "installed"


# =============================================================================
# MERGE POLICY
# =============================================================================

class TestMergePolicy:

    def _error_then_warning(self):
        fake = healthy_machine("Dell Inc.").fail("Get-Item -Path")
        fake.on("Get-NetAdapter", [WIFI_OFF])
        return fake

    def test_most_severe_prefers_actionable_warning(self):
        result = evaluate(self._error_then_warning(), merge_policy=MergePolicy.MOST_SEVERE)
        assert result.status == Severity.WARNING

    def test_last_write_takes_later_failure(self):
        result = evaluate(self._error_then_warning(), merge_policy=MergePolicy.LAST_WRITE)
        assert result.status == Severity.WARNING

    def test_last_write_error_after_warning(self):
        fake = healthy_machine("Dell Inc.").on("Get-Item -Path", {"Value": "Disabled"})
        fake.fail("Get-NetAdapter")

        assert evaluate(fake, merge_policy=MergePolicy.LAST_WRITE).status == Severity.ERROR
        assert evaluate(fake, merge_policy=MergePolicy.MOST_SEVERE).status == Severity.WARNING

    def test_passing_os_tier_keeps_firmware_warning(self):
        fake = healthy_machine("Dell Inc.").on("Get-Item -Path", {"Value": "Disabled"})
        for policy in MergePolicy:
            assert evaluate(fake, merge_policy=policy).status == Severity.WARNING


# =============================================================================
# REMEDIATE
# =============================================================================

class TestRemediate:

    def test_dell_remediation(self):
        fake = healthy_machine("Dell Inc.")
        result = evaluate(fake, Mode.REMEDIATE)

        assert result.status == Severity.COMPLIANT
        assert result.firmware_state == "Remediated"
        assert fake.called("Set-Item -Path") == 1

    def test_sets_every_adapter_even_if_enabled(self):
        fake = healthy_machine().on("Get-NetAdapter", [ETHERNET_ON, WIFI_OFF])
        result = evaluate(fake, Mode.REMEDIATE)

        assert fake.called("Set-CimInstance") == 2
        assert "Enabled wake on adapter: Ethernet" in result.trace
        assert "Enabled wake on adapter: Wi-Fi" in result.trace
        assert result.tier("os").severity == Severity.COMPLIANT

    def test_adapter_failure_does_not_stop_loop(self):
        fake = healthy_machine().on("Get-NetAdapter", [WIFI_OFF, ETHERNET_ON])
        fake.fail("'PCI\\VEN_8086&DEV_2723_0'", stderr="Access is denied")

        result = evaluate(fake, Mode.REMEDIATE)

        outcomes = result.tier("os").outcomes
        assert [(o.item, o.success) for o in outcomes] == [("Wi-Fi", False), ("Ethernet", True)]
        assert result.status == Severity.WARNING

    def test_no_adapters_is_informational(self):
        fake = healthy_machine().on("Get-NetAdapter", [])
        result = evaluate(fake, Mode.REMEDIATE)

        assert "No network adapters found." in result.trace
        assert result.tier("os").severity is None
        assert result.status == Severity.COMPLIANT

    def test_lenovo_save_failure_is_error(self):
        fake = healthy_machine("LENOVO").fail("SaveBiosSettings")
        result = evaluate(fake, Mode.REMEDIATE)

        assert result.tier("firmware").severity == Severity.ERROR
        assert result.status == Severity.ERROR

    def test_hp_partial_failure_is_error(self):
        fake = healthy_machine("HP").on("Get-HPBIOSSettingsList", [
            {"Name": "Wake On LAN", "Value": "Disable"},
            {"Name": "S5 Wake On Lan", "Value": "Disable"},
        ])
        fake.fail("-Name 'S5 Wake On Lan'")

        result = evaluate(fake, Mode.REMEDIATE)

        tier = result.tier("firmware")
        assert tier.severity == Severity.ERROR
        assert [o.success for o in tier.outcomes] == [True, False]

    def test_unsupported_still_remediates_os(self):
        fake = healthy_machine("Acer").on("Get-NetAdapter", [WIFI_OFF])
        result = evaluate(fake, Mode.REMEDIATE)

        assert result.status == Severity.UNSUPPORTED
        assert fake.called("Set-CimInstance") == 1


# =============================================================================
# ROUND TRIP
# =============================================================================

@pytest.mark.parametrize("make", ["Dell Inc.", "LENOVO"])
def test_detect_remediate_detect(make):
    fake = healthy_machine(make)
    if make == "Dell Inc.":
        fake.on("Get-Item -Path", {"Value": "Disabled"})
    else:
        fake.on("Lenovo_BiosSetting", ["Wake on LAN,Disable;[Optional:Disable,Primary]"])

    assert evaluate(fake).status == Severity.WARNING
    assert evaluate(fake, Mode.REMEDIATE).tier("firmware").severity == Severity.COMPLIANT

    if make == "Dell Inc.":
        fake.on("Get-Item -Path", {"Value": "LanOnly"})
    else:
        fake.on("Lenovo_BiosSetting", ["Wake on LAN,Primary;[Optional:Disable,Primary]"])

    assert evaluate(fake).status == Severity.COMPLIANT
