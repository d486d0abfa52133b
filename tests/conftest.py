"""
Shared pytest fixtures.
ERCOT BESS Revenue Engine
"""

import numpy as np
import pytest

from bess_revenue.core.battery.battery import BatteryConfig, HourlyBatteryConfig
from bess_revenue.core.data.intervals import RTInterval


@pytest.fixture
def hourly_prices():
    """Duck-curve day: overnight valley, solar trough, evening peak ($/MWh)."""
    hours = np.arange(24)
    prices = (
        35
        - 10 * np.exp(-((hours - 3) ** 2) / 8)
        - 15 * np.exp(-((hours - 13) ** 2) / 6)
        + 80 * np.exp(-((hours - 19) ** 2) / 3)
    )
    return [float(p) for p in prices]


@pytest.fixture
def hourly_config():
    """100 MW / 2 h battery, one cycle per day."""
    return HourlyBatteryConfig(power_mw=100, duration_hours=2, rte=0.85, cycles_per_day=1, vom=2.0)


@pytest.fixture
def coopt_config():
    """10 MW / 20 MWh battery with a 5% SoC floor."""
    return BatteryConfig(
        power_capacity_mw=10,
        energy_capacity_mwh=20,
        rte=0.81,
        min_soc=0.05,
        variable_om=2.0,
    )


@pytest.fixture
def ercot_summer_day():
    """288 five-minute intervals with an evening peak and hourly AS prices."""
    rng = np.random.default_rng(42)
    hours = np.arange(288) / 12
    lmp = 30 + 40 * np.exp(-((hours - 18) ** 2) / 4) + rng.normal(0, 3, 288)
    lmp = np.clip(lmp, 5, None)

    intervals = []
    for i in range(288):
        hour = i // 12
        load_factor = 1.4 if 15 <= hour <= 20 else 1.1 if 7 <= hour <= 14 else 0.8
        intervals.append(RTInterval.at(
            i,
            float(lmp[i]),
            reg_up_mcpc=round(10 * load_factor, 2),
            reg_down_mcpc=5.0,
            rrs_mcpc=round(12 * load_factor, 2),
            ecrs_mcpc=round(25 * load_factor, 2),
            non_spin_mcpc=3.0,
        ))
    return intervals
