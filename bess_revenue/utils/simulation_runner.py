"""
Scenario Runner
ERCOT BESS Revenue Engine

Runs batches of independent simulations (battery sizes, efficiencies, cycle
budgets) in parallel worker threads and tabulates their revenue summaries.
Each simulation is pure, so scenarios share nothing and need no locking.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Sequence, Union

import pandas as pd

from ..config.settings import DEFAULT_CYCLE_MODE, MAX_WORKERS
from ..core.battery.battery import BatteryConfig, HourlyBatteryConfig
from ..core.battery.co_optimizer import CoOptimizationResult, simulate_co_optimized
from ..core.battery.hourly_optimizer import HourlyRevenueResult, simulate_hourly
from ..core.data.intervals import RTInterval
from ..core.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)

SimulationOutput = Union[HourlyRevenueResult, CoOptimizationResult]


@dataclass(frozen=True)
class Scenario:
    """
    One simulation to run.

    Attributes
    ----------
    name : str
        Unique scenario label
    config : HourlyBatteryConfig or BatteryConfig
        Selects the hourly optimizer or the co-optimizer
    prices : sequence
        24 hourly prices for HourlyBatteryConfig, 288 RTInterval records
        for BatteryConfig
    cycle_mode : str
        Hourly optimizer cycle selection mode
    """
    name: str
    config: Union[HourlyBatteryConfig, BatteryConfig]
    prices: Sequence[Any]
    cycle_mode: str = DEFAULT_CYCLE_MODE

    def run(self) -> SimulationOutput:
        if isinstance(self.config, HourlyBatteryConfig):
            return simulate_hourly(self.prices, self.config, self.cycle_mode)
        if isinstance(self.config, BatteryConfig):
            return simulate_co_optimized(self.prices, self.config)
        raise InvalidConfigurationError(
            f"Scenario '{self.name}': unsupported config type {type(self.config).__name__}"
        )


def build_hourly_sweep(
    prices: Sequence[float],
    base_config: HourlyBatteryConfig,
    field_name: str,
    values: Iterable[Any],
    cycle_mode: str = DEFAULT_CYCLE_MODE
) -> List[Scenario]:
    """Scenarios varying one HourlyBatteryConfig field, named '<field>=<value>'."""
    return [
        Scenario(
            name=f"{field_name}={value}",
            config=replace(base_config, **{field_name: value}),
            prices=prices,
            cycle_mode=cycle_mode,
        )
        for value in values
    ]


def build_co_optimized_sweep(
    intervals: Sequence[RTInterval],
    base_config: BatteryConfig,
    field_name: str,
    values: Iterable[Any]
) -> List[Scenario]:
    """Scenarios varying one BatteryConfig field, named '<field>=<value>'."""
    return [
        Scenario(
            name=f"{field_name}={value}",
            config=replace(base_config, **{field_name: value}),
            prices=intervals,
        )
        for value in values
    ]


def run_scenarios(
    scenarios: Sequence[Scenario],
    max_workers: int = MAX_WORKERS
) -> Dict[str, SimulationOutput]:
    """
    Run scenarios in parallel.

    Parameters
    ----------
    scenarios : sequence of Scenario
        Scenarios with unique names
    max_workers : int, optional
        Thread pool size (default from BESS_MAX_WORKERS)

    Returns
    -------
    dict
        Results keyed by scenario name, in submission order

    Raises
    ------
    BessEngineError
        The first failing scenario's error, after logging it
    """
    names = [s.name for s in scenarios]
    if len(set(names)) != len(names):
        raise InvalidConfigurationError("scenario names must be unique")

    results: Dict[str, SimulationOutput] = {}
    if not scenarios:
        return results

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {s.name: executor.submit(s.run) for s in scenarios}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception:
                logger.warning("Scenario '%s' failed", name, exc_info=True)
                raise

    logger.info("Completed %d scenarios", len(results))
    return results


def summarize_results(results: Dict[str, SimulationOutput]) -> pd.DataFrame:
    """One row per scenario with the headline revenue figures ($)."""
    rows = []
    for name, result in results.items():
        if isinstance(result, HourlyRevenueResult):
            rows.append({
                'scenario': name,
                'gross_revenue': result.gross_revenue,
                'charging_cost': result.charging_cost,
                'vom_cost': result.vom_cost,
                'net_revenue': result.net_pnl,
                'as_revenue': 0.0,
                'cycles_executed': result.cycles_executed,
            })
        else:
            rows.append({
                'scenario': name,
                'gross_revenue': result.gross_revenue,
                'charging_cost': result.charging_cost,
                'vom_cost': result.vom_cost,
                'net_revenue': result.net_revenue,
                'as_revenue': result.as_revenue,
                'cycles_executed': None,
            })
    return pd.DataFrame(
        rows,
        columns=['scenario', 'gross_revenue', 'charging_cost', 'vom_cost',
                 'net_revenue', 'as_revenue', 'cycles_executed'],
    )
