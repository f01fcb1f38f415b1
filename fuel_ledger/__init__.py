"""
Fuel Ledger: fuel allocation and journey lifecycle engine for a truck fleet.
"""

from .config import FuelSystemConfig, default_fuel_config, load_fuel_config
from .errors import FuelLedgerError

__version__ = "1.0.0"

__all__ = [
    "FuelSystemConfig",
    "FuelLedgerError",
    "default_fuel_config",
    "load_fuel_config",
    "__version__",
]
