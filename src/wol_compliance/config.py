"""
Configuration management for the Wake-on-LAN compliance checker.

Loads settings from WOL_* environment variables. Every setting has a
default so the detect and remediate entry points run with no arguments.
"""

import os
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._types import MergePolicy


class CheckerConfig(BaseModel):
    """Checker configuration loaded from environment."""

    # ========================================================================
    # Logging
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level for stderr logging"
    )

    # ========================================================================
    # PowerShell Execution
    # ========================================================================

    powershell_path: str = Field(
        default="powershell.exe",
        description="PowerShell executable used for local execution"
    )

    timeout_seconds: int = Field(
        default=300,
        ge=5,
        le=3600,
        description="Timeout for each PowerShell invocation"
    )

    # ========================================================================
    # Provisioning
    # ========================================================================

    auto_provision: bool = Field(
        default=True,
        description="Install missing vendor modules before firmware checks"
    )

    psgallery_repository: str = Field(
        default="PSGallery",
        description="PowerShell repository used for module installs"
    )

    min_powershellget_version: str = Field(
        default="2.2.5",
        description="Minimum PowerShellGet version needed by HPCMSL"
    )

    # ========================================================================
    # Result Policy
    # ========================================================================

    merge_policy: MergePolicy = Field(
        default=MergePolicy.MOST_SEVERE,
        description="How tier severities combine into the overall status"
    )

    negative_status_exit_code: int = Field(
        default=0,
        ge=0,
        le=255,
        description="Process exit code for error/unsupported statuses"
    )

    hp_strict: bool = Field(
        default=False,
        description="Require every HP Wake On Lan setting to equal the remediation value"
    )

    # ========================================================================
    # Remote Target (WinRM)
    # ========================================================================

    winrm_host: Optional[str] = Field(
        default=None,
        description="Run against a remote host over WinRM instead of locally"
    )
    winrm_port: int = Field(
        default=5985,
        description="WinRM port (5986 for HTTPS)"
    )
    winrm_username: str = Field(default="")
    winrm_password: str = Field(default="")
    winrm_use_ssl: bool = Field(default=False)
    winrm_verify_ssl: bool = Field(default=True)
    winrm_transport: str = Field(
        default="ntlm",
        description="WinRM transport: ntlm, kerberos, certificate"
    )

    # ========================================================================
    # Validators
    # ========================================================================

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError('log_level must be DEBUG, INFO, WARNING, or ERROR')
        return v

    @field_validator('min_powershellget_version')
    @classmethod
    def validate_version(cls, v):
        if not re.match(r'^\d+(\.\d+){0,3}$', v):
            raise ValueError('min_powershellget_version must look like 2.2.5')
        return v

    @field_validator('winrm_transport')
    @classmethod
    def validate_transport(cls, v):
        if v not in ['ntlm', 'kerberos', 'certificate', 'basic']:
            raise ValueError('winrm_transport must be ntlm, kerberos, certificate or basic')
        return v

    @property
    def is_remote(self) -> bool:
        return bool(self.winrm_host)

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


def load_config() -> CheckerConfig:
    """
    Load configuration from environment variables.

    Returns:
        CheckerConfig: Validated configuration

    Raises:
        pydantic.ValidationError: If a setting is invalid
    """
    use_ssl = _env_bool('WOL_WINRM_USE_SSL', 'false')

    config_dict = {
        # Logging
        'log_level': os.environ.get('WOL_LOG_LEVEL', 'INFO'),

        # PowerShell
        'powershell_path': os.environ.get('WOL_POWERSHELL_PATH', 'powershell.exe'),
        'timeout_seconds': int(os.environ.get('WOL_TIMEOUT_SECONDS', '300')),

        # Provisioning
        'auto_provision': _env_bool('WOL_AUTO_PROVISION', 'true'),
        'psgallery_repository': os.environ.get('WOL_PSGALLERY_REPOSITORY', 'PSGallery'),
        'min_powershellget_version': os.environ.get('WOL_MIN_POWERSHELLGET_VERSION', '2.2.5'),

        # Result policy
        'merge_policy': os.environ.get('WOL_MERGE_POLICY', 'most_severe'),
        'negative_status_exit_code': int(os.environ.get('WOL_NEGATIVE_STATUS_EXIT_CODE', '0')),
        'hp_strict': _env_bool('WOL_HP_STRICT', 'false'),

        # WinRM
        'winrm_host': os.environ.get('WOL_WINRM_HOST') or None,
        'winrm_port': int(os.environ.get('WOL_WINRM_PORT', '5986' if use_ssl else '5985')),
        'winrm_username': os.environ.get('WOL_WINRM_USERNAME', ''),
        'winrm_password': os.environ.get('WOL_WINRM_PASSWORD', ''),
        'winrm_use_ssl': use_ssl,
        'winrm_verify_ssl': _env_bool('WOL_WINRM_VERIFY_SSL', 'true'),
        'winrm_transport': os.environ.get('WOL_WINRM_TRANSPORT', 'ntlm'),
    }

    return CheckerConfig(**config_dict)
