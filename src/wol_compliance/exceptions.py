"""
Error taxonomy for the Wake-on-LAN compliance checker.

Vendor providers and the adapter controller raise these; the evaluator
catches them at tier boundaries and converts them into a severity code
plus a trace line. Nothing here is meant to abort a run.
"""

from typing import Optional


class WolComplianceError(Exception):
    """Base class for all checker errors."""


class PowerShellError(WolComplianceError):
    """Error raised when a PowerShell invocation fails."""

    def __init__(self, message: str, exit_code: Optional[int] = None, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f" (exit code {exit_code})" if exit_code is not None else ""
        super().__init__(f"{message}{detail}")


class DependencyProvisioningFailure(WolComplianceError):
    """A required vendor module could not be made available."""

    def __init__(self, module: str, reason: str):
        self.module = module
        self.reason = reason
        super().__init__(f"Failed to provision {module}: {reason}")


class FirmwareReadFailure(WolComplianceError):
    """Vendor firmware setting could not be read."""


class FirmwareWriteFailure(WolComplianceError):
    """Vendor firmware setting could not be written."""


class UnsupportedManufacturer(WolComplianceError):
    """Manufacturer has no firmware configuration channel."""

    def __init__(self, manufacturer: str):
        self.manufacturer = manufacturer
        super().__init__(f"{manufacturer} not supported by script.")


class OSAdapterEnumerationFailure(WolComplianceError):
    """Network adapter power settings could not be listed."""


class OSAdapterSetFailure(WolComplianceError):
    """Wake-enable flag could not be set on one adapter."""

    def __init__(self, identifier: str, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Failed to enable wake on {identifier}: {reason}")
