"""System identity lookup."""

import logging
from typing import Tuple

from ._types import Manufacturer, classify_manufacturer
from .powershell import PowerShellRunner, as_object

logger = logging.getLogger(__name__)

MANUFACTURER_SCRIPT = r'''
$cs = Get-CimInstance -ClassName Win32_ComputerSystem
@{ Manufacturer = [string]$cs.Manufacturer } | ConvertTo-Json -Compress
'''


def lookup_manufacturer(runner: PowerShellRunner) -> Tuple[Manufacturer, str]:
    """
    Query Win32_ComputerSystem and classify the manufacturer.

    Returns:
        (Manufacturer, raw manufacturer string)

    Raises:
        PowerShellError: If the identity query fails or prints no object
    """
    parsed = as_object(runner.run_json(MANUFACTURER_SCRIPT))
    raw = (parsed.get("Manufacturer") or "").strip()
    manufacturer = classify_manufacturer(raw)
    logger.debug(f"Manufacturer {raw!r} classified as {manufacturer.value}")
    return manufacturer, raw
