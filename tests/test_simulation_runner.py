"""
Unit tests for the parallel scenario runner.
ERCOT BESS Revenue Engine
"""

import logging

import numpy as np
import pytest

from bess_revenue.config.settings import configure_logging
from bess_revenue.core.battery.co_optimizer import CoOptimizationResult
from bess_revenue.core.battery.hourly_optimizer import HourlyRevenueResult, simulate_hourly
from bess_revenue.core.errors import InvalidConfigurationError, MalformedInputError
from bess_revenue.utils.simulation_runner import (
    Scenario,
    build_co_optimized_sweep,
    build_hourly_sweep,
    run_scenarios,
    summarize_results,
)


def test_power_sweep_scales_net_revenue(hourly_prices, hourly_config):
    """Hour selection does not depend on power, so revenue is linear in MW."""
    scenarios = build_hourly_sweep(hourly_prices, hourly_config, 'power_mw', [50, 100, 200])
    results = run_scenarios(scenarios, max_workers=3)

    assert list(results) == ['power_mw=50', 'power_mw=100', 'power_mw=200']
    base = results['power_mw=50'].net_pnl
    assert base > 0
    assert results['power_mw=100'].net_pnl == pytest.approx(2 * base)
    assert results['power_mw=200'].net_pnl == pytest.approx(4 * base)


def test_parallel_matches_direct_call(hourly_prices, hourly_config):
    scenarios = build_hourly_sweep(hourly_prices, hourly_config, 'rte', [0.8, 0.9])
    results = run_scenarios(scenarios)

    assert results['rte=0.9'] == simulate_hourly(hourly_prices, scenarios[1].config)


def test_co_optimized_sweep(ercot_summer_day, coopt_config):
    scenarios = build_co_optimized_sweep(
        ercot_summer_day, coopt_config, 'energy_capacity_mwh', [10, 20, 40]
    )
    results = run_scenarios(scenarios)

    assert len(results) == 3
    assert all(isinstance(r, CoOptimizationResult) for r in results.values())


def test_mixed_scenarios_summary(hourly_prices, hourly_config, ercot_summer_day, coopt_config):
    results = run_scenarios([
        Scenario('dam', hourly_config, hourly_prices),
        Scenario('rt', coopt_config, ercot_summer_day),
    ])
    summary = summarize_results(results)

    assert isinstance(results['dam'], HourlyRevenueResult)
    assert len(summary) == 2
    assert list(summary['scenario']) == ['dam', 'rt']
    dam = summary.set_index('scenario').loc['dam']
    assert dam['net_revenue'] == pytest.approx(results['dam'].net_pnl)
    assert dam['as_revenue'] == 0
    rt = summary.set_index('scenario').loc['rt']
    assert rt['as_revenue'] == pytest.approx(results['rt'].as_revenue)


def test_single_scenario(hourly_prices, hourly_config):
    results = run_scenarios([Scenario('only', hourly_config, hourly_prices)])
    assert results['only'].cycles_executed == 1


def test_empty_batch():
    assert run_scenarios([]) == {}
    assert summarize_results({}).empty


def test_duplicate_names_rejected(hourly_prices, hourly_config):
    scenario = Scenario('same', hourly_config, hourly_prices)
    with pytest.raises(InvalidConfigurationError):
        run_scenarios([scenario, scenario])


def test_failing_scenario_is_logged_and_raised(hourly_prices, hourly_config, caplog):
    scenarios = [
        Scenario('good', hourly_config, hourly_prices),
        Scenario('short', hourly_config, hourly_prices[:20]),
    ]
    with caplog.at_level(logging.WARNING, logger='bess_revenue'):
        with pytest.raises(MalformedInputError):
            run_scenarios(scenarios)

    assert "Scenario 'short' failed" in caplog.text


def test_unsupported_config_type(hourly_prices):
    with pytest.raises(InvalidConfigurationError):
        Scenario('bad', {'power_mw': 10}, hourly_prices).run()


def test_configure_logging_is_idempotent():
    configure_logging('DEBUG')
    configure_logging('DEBUG')
    logger = logging.getLogger('bess_revenue')

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_single_failing_scenario_is_logged(hourly_config, caplog):
    with caplog.at_level(logging.WARNING, logger='bess_revenue'):
        with pytest.raises(MalformedInputError):
            run_scenarios([Scenario('alone', hourly_config, [50.0] * 10)])

    assert "Scenario 'alone' failed" in caplog.text


def test_cycle_sweep_accepts_numpy_integers(hourly_prices, hourly_config):
    scenarios = build_hourly_sweep(
        hourly_prices, hourly_config, 'cycles_per_day', np.arange(1, 4)
    )
    results = run_scenarios(scenarios)

    assert list(results) == ['cycles_per_day=1', 'cycles_per_day=2', 'cycles_per_day=3']
    assert all(r.cycles_executed >= 1 for r in results.values())


def test_soc_floor_sweep(ercot_summer_day, coopt_config):
    scenarios = build_co_optimized_sweep(
        ercot_summer_day, coopt_config, 'min_soc', [0.05, 0.3, 0.6]
    )
    results = run_scenarios(scenarios)

    assert len(results) == 3
    assert min(d.soc for d in results['min_soc=0.6'].dispatch) >= 60.0 - 1e-9
