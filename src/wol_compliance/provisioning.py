"""
Pre-flight provisioning of vendor PowerShell modules.

Vendor channels that ship as PowerShell Gallery modules (DellBIOSProvider,
HPCMSL) must be present before the firmware tier can run. The provisioner
checks each requirement, installs what is missing when allowed, and
returns a typed ProvisioningResult that is handed to the vendor provider.

Steps, in order:
1. NuGet package provider (needed by Install-Module)
2. PowerShellGet minimum version (HPCMSL only; an upgrade needs a rerun
   because the running session keeps the old module loaded)
3. Each required module
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .exceptions import DependencyProvisioningFailure, PowerShellError
from .powershell import PowerShellRunner, as_object, ps_quote

logger = logging.getLogger(__name__)

NUGET_MIN_VERSION = "2.8.5.201"


class ProvisioningStatus(str, Enum):
    """Outcome of the pre-flight capability check."""
    AVAILABLE = "available"
    INSTALLED = "installed"
    RERUN_REQUIRED = "rerun_required"
    FAILED = "failed"


@dataclass
class ModuleRequirement:
    """A PowerShell module a vendor channel depends on."""
    name: str
    needs_current_powershellget: bool = False


@dataclass
class ProvisioningResult:
    """Typed result of ModuleProvisioner.ensure()."""
    status: ProvisioningStatus
    messages: List[str] = field(default_factory=list)
    installed: List[str] = field(default_factory=list)
    error: Optional[DependencyProvisioningFailure] = None

    @property
    def ready(self) -> bool:
        """True when vendor calls may proceed."""
        return self.status in (ProvisioningStatus.AVAILABLE, ProvisioningStatus.INSTALLED)


def parse_version(value: str) -> Tuple[int, ...]:
    """Parse a dotted version string; non-numeric parts count as 0."""
    parts = []
    for piece in (value or "0").split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def version_at_least(installed: str, minimum: str) -> bool:
    a, b = parse_version(installed), parse_version(minimum)
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)) >= b + (0,) * (width - len(b))


class ModuleProvisioner:
    """Check and install PowerShell modules needed by vendor providers."""

    NUGET_CHECK = r'''
$p = Get-PackageProvider -ListAvailable -ErrorAction SilentlyContinue |
    Where-Object { $_.Name -eq 'NuGet' } |
    Sort-Object Version -Descending | Select-Object -First 1
@{ Installed = [bool]$p; Version = if ($p) { [string]$p.Version } else { $null } } | ConvertTo-Json -Compress
'''

    NUGET_INSTALL = r'''
Install-PackageProvider -Name NuGet -MinimumVersion {min_version} -Force -Scope AllUsers | Out-Null
@{{ Installed = $true }} | ConvertTo-Json -Compress
'''

    MODULE_CHECK = r'''
$m = Get-Module -ListAvailable -Name {name} | Sort-Object Version -Descending | Select-Object -First 1
@{{ Installed = [bool]$m; Version = if ($m) {{ [string]$m.Version }} else {{ $null }} }} | ConvertTo-Json -Compress
'''

    MODULE_INSTALL = r'''
Install-Module -Name {name} -Repository {repository} -Force -AllowClobber -Scope AllUsers
@{{ Installed = $true }} | ConvertTo-Json -Compress
'''

    def __init__(
        self,
        runner: PowerShellRunner,
        auto_install: bool = True,
        repository: str = "PSGallery",
        min_powershellget_version: str = "2.2.5",
    ):
        self.runner = runner
        self.auto_install = auto_install
        self.repository = repository
        self.min_powershellget_version = min_powershellget_version

    def ensure(self, requirements: Sequence[ModuleRequirement]) -> ProvisioningResult:
        """
        Make every requirement available.

        Never raises for provisioning problems; failures come back as
        ProvisioningStatus.FAILED with the error attached.
        """
        result = ProvisioningResult(status=ProvisioningStatus.AVAILABLE)
        if not requirements:
            return result

        try:
            self._ensure_nuget(result)

            if any(r.needs_current_powershellget for r in requirements):
                if not self._ensure_powershellget(result):
                    result.status = ProvisioningStatus.RERUN_REQUIRED
                    return result

            for requirement in requirements:
                self._ensure_module(requirement.name, result)

        except DependencyProvisioningFailure as e:
            logger.warning(str(e))
            result.status = ProvisioningStatus.FAILED
            result.error = e
            result.messages.append(str(e))
            return result

        if result.installed:
            result.status = ProvisioningStatus.INSTALLED
        return result

    # =========================================================================
    # Steps
    # =========================================================================

    def _ensure_nuget(self, result: ProvisioningResult) -> None:
        state = self._query("NuGet", self.NUGET_CHECK)
        version = state.get("Version") or "0"

        if state.get("Installed") and version_at_least(version, NUGET_MIN_VERSION):
            return

        if state.get("Installed"):
            result.messages.append(f"NuGet package provider {version} is older than {NUGET_MIN_VERSION}.")
        else:
            result.messages.append("NuGet package provider missing.")
        self._install("NuGet", self.NUGET_INSTALL.format(min_version=NUGET_MIN_VERSION))
        result.installed.append("NuGet")
        result.messages.append("NuGet package provider installed.")

    def _ensure_powershellget(self, result: ProvisioningResult) -> bool:
        """Returns False when an upgrade happened and the run must be repeated."""
        state = self._query("PowerShellGet", self.MODULE_CHECK.format(name=ps_quote("PowerShellGet")))
        version = state.get("Version") or "0"

        if state.get("Installed") and version_at_least(version, self.min_powershellget_version):
            return True

        result.messages.append(
            f"PowerShellGet {version} is older than {self.min_powershellget_version}."
        )
        self._install("PowerShellGet", self.MODULE_INSTALL.format(
            name=ps_quote("PowerShellGet"),
            repository=ps_quote(self.repository),
        ))
        result.installed.append("PowerShellGet")
        result.messages.append("PowerShellGet updated. Rerun required.")
        return False

    def _ensure_module(self, name: str, result: ProvisioningResult) -> None:
        state = self._query(name, self.MODULE_CHECK.format(name=ps_quote(name)))
        if state.get("Installed"):
            result.messages.append(f"{name} module found.")
            return

        result.messages.append(f"{name} module missing.")
        self._install(name, self.MODULE_INSTALL.format(
            name=ps_quote(name),
            repository=ps_quote(self.repository),
        ))
        result.installed.append(name)
        result.messages.append(f"{name} module installed.")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _query(self, name: str, script: str) -> dict:
        try:
            return as_object(self.runner.run_json(script))
        except PowerShellError as e:
            raise DependencyProvisioningFailure(name, f"check failed: {e}") from e

    def _install(self, name: str, script: str) -> None:
        if not self.auto_install:
            raise DependencyProvisioningFailure(name, "not installed and auto-provisioning is disabled")

        logger.info(f"Installing {name}")
        try:
            self.runner.run_json(script)
        except PowerShellError as e:
            raise DependencyProvisioningFailure(name, f"install failed: {e}") from e
