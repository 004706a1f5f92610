"""
PowerShell execution for firmware and adapter queries.

Every collaborator the checker talks to (vendor BIOS channels, WMI,
PowerShellGet) is reached by running a PowerShell snippet that prints
JSON. Two runners are provided:

- LocalPowerShellRunner: powershell.exe on this machine (default)
- WinRMPowerShellRunner: a remote Windows host via pywinrm
"""

import json
import logging
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import winrm

from .config import CheckerConfig
from .exceptions import PowerShellError

logger = logging.getLogger(__name__)

# Make cmdlet errors terminating so they surface as a non-zero exit code
PREAMBLE = "$ErrorActionPreference = 'Stop'\n$ProgressPreference = 'SilentlyContinue'\n"


@dataclass
class PowerShellResult:
    """Result of one PowerShell invocation."""
    status_code: int
    std_out: str
    std_err: str
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status_code == 0


def as_list(parsed: Any) -> List[Any]:
    """
    Normalize ConvertTo-Json output to a list.

    PowerShell emits a bare object for one-element pipelines and nothing
    at all for empty ones.
    """
    if parsed is None:
        return []
    if isinstance(parsed, list):
        return parsed
    return [parsed]


def as_object(parsed: Any) -> Dict[str, Any]:
    """
    Return the JSON object a script printed, or {} when it printed nothing.

    Stray pipeline output can turn a single object into an array; the last
    object in it is the one the script wrote.

    Raises:
        PowerShellError: If the output holds no JSON object
    """
    if parsed is None:
        return {}
    objects = [item for item in as_list(parsed) if isinstance(item, dict)]
    if not objects:
        raise PowerShellError(f"Expected a JSON object, got {type(parsed).__name__}: {parsed!r}")
    return objects[-1]


class PowerShellRunner(ABC):
    """Base runner. Subclasses implement run()."""

    @abstractmethod
    def run(self, script: str) -> PowerShellResult:
        """Run a script and return its raw result."""
        pass

    def run_json(self, script: str) -> Any:
        """
        Run a script and parse its stdout as JSON.

        Returns:
            Parsed JSON, or None when the script printed nothing

        Raises:
            PowerShellError: On non-zero exit or unparsable output
        """
        result = self.run(PREAMBLE + script)

        if not result.success:
            raise PowerShellError(
                result.std_err.strip() or "PowerShell command failed",
                exit_code=result.status_code,
                stderr=result.std_err,
            )

        output = result.std_out.strip()
        if not output:
            return None

        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise PowerShellError(f"Unparsable PowerShell output: {e}") from e


class LocalPowerShellRunner(PowerShellRunner):
    """Run PowerShell on the local machine via subprocess."""

    def __init__(self, executable: str = "powershell.exe", timeout: int = 300):
        self.executable = executable
        self.timeout = timeout

    def _command(self, script: str) -> List[str]:
        return [
            self.executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy", "Bypass",
            "-Command", script,
        ]

    def run(self, script: str) -> PowerShellResult:
        start = time.monotonic()

        try:
            completed = subprocess.run(
                self._command(script),
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise PowerShellError(f"Execution timed out after {self.timeout}s") from e
        except OSError as e:
            raise PowerShellError(f"Could not start {self.executable}: {e}") from e

        return PowerShellResult(
            status_code=completed.returncode,
            std_out=completed.stdout.decode('utf-8', errors='replace') if completed.stdout else "",
            std_err=completed.stderr.decode('utf-8', errors='replace') if completed.stderr else "",
            duration_seconds=time.monotonic() - start,
        )


class WinRMPowerShellRunner(PowerShellRunner):
    """
    Run PowerShell on a remote Windows host via WinRM.

    Uses pywinrm. Supports NTLM, Kerberos, and certificate authentication.
    """

    def __init__(
        self,
        hostname: str,
        port: int = 5985,
        username: str = "",
        password: str = "",
        use_ssl: bool = False,
        verify_ssl: bool = True,
        transport: str = "ntlm",
        timeout: int = 300,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.verify_ssl = verify_ssl
        self.transport = transport
        self.timeout = timeout
        self._session: Optional[winrm.Session] = None

    def _get_session(self) -> winrm.Session:
        """Get or create the WinRM session."""
        if self._session is None:
            protocol = "https" if self.use_ssl else "http"
            endpoint = f"{protocol}://{self.hostname}:{self.port}/wsman"

            self._session = winrm.Session(
                endpoint,
                auth=(self.username, self.password),
                transport=self.transport,
                server_cert_validation='validate' if self.verify_ssl else 'ignore',
                operation_timeout_sec=self.timeout,
                read_timeout_sec=self.timeout + 10,
            )

        return self._session

    def run(self, script: str) -> PowerShellResult:
        start = time.monotonic()
        session = self._get_session()

        try:
            result = session.run_ps(script)
        except Exception as e:
            logger.debug(f"WinRM call to {self.hostname} failed", exc_info=True)
            raise PowerShellError(f"WinRM execution on {self.hostname} failed: {e}") from e

        return PowerShellResult(
            status_code=result.status_code,
            std_out=result.std_out.decode('utf-8', errors='replace') if result.std_out else "",
            std_err=result.std_err.decode('utf-8', errors='replace') if result.std_err else "",
            duration_seconds=time.monotonic() - start,
        )


def build_runner(config: CheckerConfig) -> PowerShellRunner:
    """Pick the runner described by the configuration."""
    if config.is_remote:
        logger.info(f"Using WinRM target {config.winrm_host}:{config.winrm_port}")
        return WinRMPowerShellRunner(
            hostname=config.winrm_host,
            port=config.winrm_port,
            username=config.winrm_username,
            password=config.winrm_password,
            use_ssl=config.winrm_use_ssl,
            verify_ssl=config.winrm_verify_ssl,
            transport=config.winrm_transport,
            timeout=config.timeout_seconds,
        )

    return LocalPowerShellRunner(
        executable=config.powershell_path,
        timeout=config.timeout_seconds,
    )


def ps_quote(value: str) -> str:
    """Quote a value as a single-quoted PowerShell string literal."""
    return "'" + value.replace("'", "''") + "'"

