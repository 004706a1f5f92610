"""
Compliance evaluator for Wake-on-LAN.

Runs the three evaluation tiers in fixed order and folds their severities
into one ComplianceResult:

1. Dependency provisioning (vendor PowerShell modules)
2. Firmware tier (vendor BIOS/UEFI setting)
3. OS tier (per-adapter wake-enable flag)

Every tier failure is caught here and turned into a severity code plus a
trace line; evaluation always continues to the next tier.
"""

import logging
from typing import Optional

from ._types import Mode, Severity, merge_severity
from .adapters import AdapterPowerController, non_compliant
from .config import CheckerConfig
from .exceptions import (
    FirmwareReadFailure,
    FirmwareWriteFailure,
    OSAdapterEnumerationFailure,
    PowerShellError,
    UnsupportedManufacturer,
)
from .identity import lookup_manufacturer
from .models import ComplianceResult, TierResult
from .powershell import PowerShellRunner
from .provisioning import ModuleProvisioner, ProvisioningResult, ProvisioningStatus
from .vendors import VendorProvider, get_provider, provider_class

logger = logging.getLogger(__name__)


class ComplianceEvaluator:
    """
    Detect or remediate Wake-on-LAN compliance on one machine.

    Collaborators default to instances built from the runner; tests may
    inject their own.
    """

    def __init__(
        self,
        config: CheckerConfig,
        runner: PowerShellRunner,
        provisioner: Optional[ModuleProvisioner] = None,
        adapters: Optional[AdapterPowerController] = None,
    ):
        self.config = config
        self.runner = runner
        self.provisioner = provisioner or ModuleProvisioner(
            runner,
            auto_install=config.auto_provision,
            repository=config.psgallery_repository,
            min_powershellget_version=config.min_powershellget_version,
        )
        self.adapters = adapters or AdapterPowerController(runner)

    def detect(self) -> ComplianceResult:
        return self.run(Mode.DETECT)

    def remediate(self) -> ComplianceResult:
        return self.run(Mode.REMEDIATE)

    def run(self, mode: Mode) -> ComplianceResult:
        """Evaluate all tiers in order and return the aggregate result."""
        result = ComplianceResult(mode=mode)
        logger.info(f"Starting Wake-on-LAN {mode.value}")

        provider = self._prepare_provider(result)
        if provider is not None:
            self._firmware_tier(result, provider)

        self._os_tier(result)

        logger.info(f"Wake-on-LAN {mode.value} finished with status {result.status.value}")
        return result

    # =========================================================================
    # Tier bookkeeping
    # =========================================================================

    def _record(self, result: ComplianceResult, tier: TierResult) -> None:
        result.tiers.append(tier)
        result.status = merge_severity(result.status, tier.severity, self.config.merge_policy)

    # =========================================================================
    # Identity + provisioning
    # =========================================================================

    def _prepare_provider(self, result: ComplianceResult) -> Optional[VendorProvider]:
        """
        Identify the machine and provision its vendor channel.

        Returns None when the firmware tier must be skipped; the reason has
        already been recorded on the result.
        """
        try:
            manufacturer, raw = lookup_manufacturer(self.runner)
        except PowerShellError as e:
            result.firmware_state = "Unknown"
            result.log(f"Unable to determine manufacturer: {e}")
            self._record(result, TierResult(tier="firmware", severity=Severity.ERROR, summary="Unknown"))
            return None

        result.manufacturer = manufacturer
        result.manufacturer_raw = raw

        try:
            cls = provider_class(manufacturer, raw)
        except UnsupportedManufacturer as e:
            result.firmware_state = "Unsupported"
            result.log(str(e))
            self._record(result, TierResult(tier="firmware", severity=Severity.UNSUPPORTED, summary="Unsupported"))
            return None

        capability = self.provisioner.ensure(cls.requirements)
        self._record_provisioning(result, capability)

        if not capability.ready:
            result.firmware_state = "Not checked"
            return None

        return get_provider(manufacturer, self.runner, capability, hp_strict=self.config.hp_strict)

    def _record_provisioning(self, result: ComplianceResult, capability: ProvisioningResult) -> None:
        for message in capability.messages:
            result.log(message)

        severity = None
        if capability.status == ProvisioningStatus.FAILED:
            severity = Severity.ERROR
            result.log("Dependency provisioning failed; firmware tier skipped.")
        elif capability.status == ProvisioningStatus.RERUN_REQUIRED:
            severity = Severity.WARNING
            result.log("Dependencies were updated. Rerun to check firmware settings.")

        self._record(result, TierResult(
            tier="provisioning",
            severity=severity,
            summary=capability.status.value,
        ))

    # =========================================================================
    # Firmware tier
    # =========================================================================

    def _firmware_tier(self, result: ComplianceResult, provider: VendorProvider) -> None:
        result.log(f"{provider.manufacturer.value} system.")

        if result.mode == Mode.DETECT:
            tier = self._detect_firmware(result, provider)
        else:
            tier = self._remediate_firmware(result, provider)

        result.firmware_state = tier.summary
        self._record(result, tier)

    def _detect_firmware(self, result: ComplianceResult, provider: VendorProvider) -> TierResult:
        try:
            setting = provider.detect()
        except FirmwareReadFailure as e:
            result.log(str(e))
            return TierResult(tier="firmware", severity=Severity.ERROR, summary="Read failed")

        result.log(provider.describe(setting))

        if setting.raw_value is None:
            return TierResult(tier="firmware", severity=None, summary="Not found")
        if setting.is_compliant:
            return TierResult(tier="firmware", severity=Severity.COMPLIANT, summary=setting.raw_value)

        result.log(f"{provider.manufacturer.value} WoL setting is not compliant.")
        return TierResult(tier="firmware", severity=Severity.WARNING, summary=setting.raw_value)

    def _remediate_firmware(self, result: ComplianceResult, provider: VendorProvider) -> TierResult:
        try:
            outcomes = provider.remediate()
        except FirmwareWriteFailure as e:
            result.log(str(e))
            return TierResult(tier="firmware", severity=Severity.ERROR, summary="Remediation failed")

        if not outcomes:
            result.log(f"No {provider.manufacturer.value} WoL settings found to remediate.")
            return TierResult(tier="firmware", severity=None, summary="Not found")

        for outcome in outcomes:
            if outcome.success:
                result.log(f"{outcome.item}: {outcome.message}.")
            else:
                result.log(f"{outcome.item}: failed ({outcome.message}).")

        tier = TierResult(tier="firmware", severity=Severity.COMPLIANT, summary="Remediated", outcomes=outcomes)
        if tier.failed_items:
            tier.severity = Severity.ERROR
            tier.summary = "Remediation failed"
        return tier

    # =========================================================================
    # OS tier
    # =========================================================================

    def _os_tier(self, result: ComplianceResult) -> None:
        try:
            adapters = self.adapters.list_adapters()
        except OSAdapterEnumerationFailure as e:
            result.log(str(e))
            result.os_state = "Enumeration failed"
            self._record(result, TierResult(tier="os", severity=Severity.ERROR, summary=result.os_state))
            return

        if result.mode == Mode.DETECT:
            tier = self._detect_os(result, adapters)
        else:
            tier = self._remediate_os(result, adapters)

        result.os_state = tier.summary
        self._record(result, tier)

    def _detect_os(self, result: ComplianceResult, adapters) -> TierResult:
        if not adapters:
            result.log("No wake-capable network adapters found.")
            return TierResult(tier="os", severity=Severity.COMPLIANT, summary="No adapters")

        disabled = non_compliant(adapters)
        if not disabled:
            result.log(f"Wake enabled on all {len(adapters)} network adapter(s).")
            return TierResult(tier="os", severity=Severity.COMPLIANT, summary="All adapters wake-enabled")

        for adapter in disabled:
            result.log(f"Wake disabled on adapter: {adapter.identifier}")
        return TierResult(
            tier="os",
            severity=Severity.WARNING,
            summary=f"{len(disabled)} of {len(adapters)} adapter(s) wake-disabled",
        )

    def _remediate_os(self, result: ComplianceResult, adapters) -> TierResult:
        if not adapters:
            result.log("No network adapters found.")
            return TierResult(tier="os", severity=None, summary="No adapters")

        outcomes = []
        for adapter in adapters:
            outcome = self.adapters.enable_wake(adapter)
            outcomes.append(outcome)
            if outcome.success:
                result.log(f"Enabled wake on adapter: {adapter.identifier}")
            else:
                result.log(f"Failed to enable wake on adapter {adapter.identifier}: {outcome.message}")

        tier = TierResult(tier="os", severity=Severity.COMPLIANT, outcomes=outcomes)
        failed = tier.failed_items
        if failed:
            tier.severity = Severity.WARNING
            tier.summary = f"{len(failed)} of {len(adapters)} adapter(s) failed"
        else:
            tier.summary = f"Wake enabled on {len(adapters)} adapter(s)"
        return tier
