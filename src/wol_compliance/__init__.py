"""Wake-on-LAN Compliance Checker - firmware and OS tier detect/remediate"""

__version__ = "0.1.0"

from ._types import Manufacturer, Severity, Mode, MergePolicy, classify_manufacturer
from .config import CheckerConfig, load_config
from .models import FirmwareSetting, NetworkAdapter, ItemOutcome, TierResult, ComplianceResult
from .evaluator import ComplianceEvaluator

__all__ = [
    # Version
    "__version__",

    # Types
    "Manufacturer",
    "Severity",
    "Mode",
    "MergePolicy",
    "classify_manufacturer",

    # Configuration
    "CheckerConfig",
    "load_config",

    # Models
    "FirmwareSetting",
    "NetworkAdapter",
    "ItemOutcome",
    "TierResult",
    "ComplianceResult",

    # Evaluation
    "ComplianceEvaluator",
]
