"""
Engine Settings and Constants
ERCOT BESS Revenue Engine
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Time base
HOURS_PER_DAY = 24
INTERVALS_PER_HOUR = 12  # 5-minute SCED intervals
INTERVALS_PER_DAY = HOURS_PER_DAY * INTERVALS_PER_HOUR
INTERVAL_HOURS = 1 / INTERVALS_PER_HOUR

# Battery defaults (hourly DAM arbitrage)
DEFAULT_HOURLY_BATTERY = {
    'power_mw': 100,
    'duration_hours': 2,
    'rte': 0.85,
    'cycles_per_day': 1,
    'vom': 2.0,
}

# Battery defaults (5-minute energy + AS co-optimization)
DEFAULT_COOPT_BATTERY = {
    'power_capacity_mw': 100,
    'energy_capacity_mwh': 200,
    'rte': 0.85,
    'min_soc': 0.05,
    'variable_om': 2.0,
}

# Co-optimizer starting SoC when BatteryConfig.initial_soc is omitted
DEFAULT_INITIAL_SOC = 0.5

# Hourly optimizer cycle selection
CYCLE_MODES = ('independent', 'sequential')
DEFAULT_CYCLE_MODE = 'independent'

# Energy arbitrage: charge below this percentile of the day's LMPs
CHARGE_THRESHOLD_PERCENTILE = 25

# Ancillary service products.
#   commit_fraction: share of power capacity offered when economic
#   hold_hours: energy that must stay in reserve, in hours at committed MW
#   lmp_multiplier: award when MCPC > median LMP x RTE x multiplier
#   vom_multiplier: award when MCPC > VOM x multiplier
AS_PRODUCTS = {
    'ecrs': {'commit_fraction': 0.15, 'hold_hours': 2, 'lmp_multiplier': 0.5},
    'rrs': {'commit_fraction': 0.10, 'hold_hours': 1, 'lmp_multiplier': 0.4},
    'reg_up': {'commit_fraction': 0.10, 'hold_hours': 0, 'vom_multiplier': 1.0},
    'non_spin': {'commit_fraction': 0.08, 'hold_hours': 0, 'vom_multiplier': 0.5},
    'reg_down': {'commit_fraction': 0.08, 'hold_hours': 0},
}

# Scenario runner
MAX_WORKERS = int(os.getenv("BESS_MAX_WORKERS", "4"))

# Logging
LOG_LEVEL = os.getenv("BESS_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Attach a stream handler to the package logger at the given level."""
    logger = logging.getLogger("bess_revenue")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
