"""
Vendor capability providers for firmware Wake-on-LAN.

get_provider() is the only place a Manufacturer is mapped to a channel.
"""

from typing import Optional

from .._types import Manufacturer
from ..exceptions import UnsupportedManufacturer
from ..powershell import PowerShellRunner
from ..provisioning import ProvisioningResult
from .base import VendorProvider
from .dell import DellProvider
from .hp import HPProvider
from .lenovo import LenovoProvider


def provider_class(manufacturer: Manufacturer, raw: str = "") -> type:
    """
    Resolve the provider class for a manufacturer.

    Raises:
        UnsupportedManufacturer: For Manufacturer.UNSUPPORTED
    """
    if manufacturer == Manufacturer.DELL:
        return DellProvider
    if manufacturer == Manufacturer.HP:
        return HPProvider
    if manufacturer == Manufacturer.LENOVO:
        return LenovoProvider
    if manufacturer == Manufacturer.UNSUPPORTED:
        raise UnsupportedManufacturer(raw or "Unknown manufacturer")
    raise AssertionError(f"Unhandled manufacturer: {manufacturer!r}")


def get_provider(
    manufacturer: Manufacturer,
    runner: PowerShellRunner,
    capability: Optional[ProvisioningResult] = None,
    hp_strict: bool = False,
) -> VendorProvider:
    """Build the provider for a manufacturer."""
    cls = provider_class(manufacturer)
    if cls is HPProvider:
        return HPProvider(runner, capability, strict=hp_strict)
    return cls(runner, capability)


__all__ = [
    'VendorProvider',
    'DellProvider',
    'HPProvider',
    'LenovoProvider',
    'provider_class',
    'get_provider',
]
