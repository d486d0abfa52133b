"""
Hourly Dispatch Optimizer
ERCOT BESS Revenue Engine

Greedy day-ahead arbitrage: each cycle buys the cheapest block of hours and
sells the most expensive block, committed only when the cycle clears its
charging and O&M costs.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import List, Literal, Optional, Sequence

import pandas as pd

from ...config.settings import CYCLE_MODES, DEFAULT_CYCLE_MODE, HOURS_PER_DAY
from ...utils.data_validation import validate_hourly_prices
from ...utils.numerics import clamp, mean, round_half_up
from ..errors import InvalidConfigurationError
from .battery import HourlyBatteryConfig
from .revenue import RevenueLedger

logger = logging.getLogger(__name__)


@dataclass
class HourlyDispatch:
    """
    Dispatch outcome for one hour.

    Attributes
    ----------
    hour : int
        Hour of day (0-23)
    label : str
        Clock label, "HH:00"
    price : float
        Energy price ($/MWh)
    action : {'charge', 'discharge', 'idle'}
        Action taken this hour
    soc : float
        State of charge at the end of the hour (0-100%)
    revenue : float
        Energy sold this hour ($)
    charge_cost : float
        Energy bought this hour, grossed up by RTE ($)
    vom_cost : float
        Variable O&M on discharged energy ($)
    """
    hour: int
    label: str
    price: float
    action: Literal['charge', 'discharge', 'idle']
    soc: float
    revenue: float = 0.0
    charge_cost: float = 0.0
    vom_cost: float = 0.0


@dataclass
class HourlyRevenueResult:
    """Daily dispatch trace and revenue breakdown ($) of the hourly optimizer."""
    hourly_dispatch: List[HourlyDispatch]
    gross_revenue: float
    charging_cost: float
    efficiency_loss: float
    vom_cost: float
    net_pnl: float
    daily_captured_spread: float
    avg_charge_price: float
    avg_discharge_price: float
    cycles_executed: int

    @property
    def charge_hours(self) -> List[int]:
        return [d.hour for d in self.hourly_dispatch if d.action == 'charge']

    @property
    def discharge_hours(self) -> List[int]:
        return [d.hour for d in self.hourly_dispatch if d.action == 'discharge']

    def to_dataframe(self) -> pd.DataFrame:
        """Hour-by-hour dispatch as a DataFrame (one row per hour)."""
        return pd.DataFrame(
            [asdict(d) for d in self.hourly_dispatch],
            columns=['hour', 'label', 'price', 'action', 'soc',
                     'revenue', 'charge_cost', 'vom_cost'],
        )


@dataclass
class CyclePlan:
    """Candidate charge/discharge hour-sets for one cycle and their economics."""
    charge_hours: List[int] = field(default_factory=list)
    discharge_hours: List[int] = field(default_factory=list)
    gross_revenue: float = 0.0
    charge_cost: float = 0.0
    vom_cost: float = 0.0

    @property
    def net_profit(self) -> float:
        return self.gross_revenue - self.charge_cost - self.vom_cost


class HourlyDispatchOptimizer:
    """
    Greedy multi-cycle arbitrage over 24 hourly prices.

    Two cycle selection modes are available:

    - ``'independent'``: every cycle picks the N cheapest unused hours to
      charge and the N most expensive remaining hours to discharge, anywhere
      in the day. An unprofitable cycle is skipped and the loop carries on.
    - ``'sequential'``: a cycle may only use hours after the previous cycle's
      last discharge, and charging must precede discharging. Every split
      point in that window is tried; the first unprofitable cycle ends
      the day.

    Attributes
    ----------
    config : HourlyBatteryConfig
        Battery specifications
    cycle_mode : str
        One of CYCLE_MODES
    """

    def __init__(self, config: HourlyBatteryConfig, cycle_mode: str = DEFAULT_CYCLE_MODE):
        if cycle_mode not in CYCLE_MODES:
            raise InvalidConfigurationError(
                f"cycle_mode must be one of {CYCLE_MODES}, got {cycle_mode!r}"
            )
        self.config = config
        self.cycle_mode = cycle_mode

    @property
    def hours_per_cycle(self) -> int:
        return max(1, round_half_up(self.config.duration_hours))

    @property
    def num_cycles(self) -> int:
        return max(1, round_half_up(self.config.cycles_per_day))

    def _price_cycle(
        self,
        prices: Sequence[float],
        charge_hours: List[int],
        discharge_hours: List[int]
    ) -> CyclePlan:
        """Cycle economics; charging energy is grossed up by the full RTE."""
        cfg = self.config
        n = self.hours_per_cycle
        avg_charge = mean([prices[h] for h in charge_hours])
        avg_discharge = mean([prices[h] for h in discharge_hours])
        return CyclePlan(
            charge_hours=charge_hours,
            discharge_hours=discharge_hours,
            gross_revenue=cfg.power_mw * avg_discharge * n,
            charge_cost=(cfg.power_mw / cfg.rte) * avg_charge * n,
            vom_cost=cfg.power_mw * n * cfg.vom,
        )

    def _plan_independent(self, prices: Sequence[float], available: List[int]) -> CyclePlan:
        n = self.hours_per_cycle
        charge_hours = sorted(available, key=lambda h: prices[h])[:n]
        remaining = [h for h in available if h not in charge_hours]
        discharge_hours = sorted(remaining, key=lambda h: prices[h], reverse=True)[:n]
        return self._price_cycle(prices, charge_hours, discharge_hours)

    def _plan_sequential(
        self,
        prices: Sequence[float],
        available: List[int],
        start_hour: int
    ) -> Optional[CyclePlan]:
        """Best split of the window into an earlier charge block and later discharge block."""
        n = self.hours_per_cycle
        best: Optional[CyclePlan] = None
        for split in range(start_hour + n, HOURS_PER_DAY - n + 1):
            left = [h for h in available if h < split]
            right = [h for h in available if h >= split]
            if len(left) < n or len(right) < n:
                continue
            plan = self._price_cycle(
                prices,
                sorted(left, key=lambda h: prices[h])[:n],
                sorted(right, key=lambda h: prices[h], reverse=True)[:n],
            )
            if best is None or plan.net_profit > best.net_profit:
                best = plan
        return best

    def _build_dispatch(self, prices: Sequence[float], actions: List[str]) -> List[HourlyDispatch]:
        """Replay committed actions into an hourly SoC and cash flow trace, starting empty."""
        cfg = self.config
        soc_step = cfg.power_mw / cfg.energy_capacity_mwh * 100
        soc = 0.0
        dispatch = []
        for hour, action in enumerate(actions):
            price = prices[hour]
            revenue = charge_cost = vom_cost = 0.0
            if action == 'charge':
                soc = clamp(soc + soc_step, 0.0, 100.0)
                charge_cost = cfg.power_mw / cfg.rte * price
            elif action == 'discharge':
                soc = clamp(soc - soc_step, 0.0, 100.0)
                revenue = cfg.power_mw * price
                vom_cost = cfg.power_mw * cfg.vom
            dispatch.append(HourlyDispatch(
                hour=hour,
                label=f"{hour:02d}:00",
                price=price,
                action=action,
                soc=soc,
                revenue=revenue,
                charge_cost=charge_cost,
                vom_cost=vom_cost,
            ))
        return dispatch

    def simulate(self, prices: Sequence[float]) -> HourlyRevenueResult:
        """
        Run the optimizer over one day of prices.

        Parameters
        ----------
        prices : sequence of float
            24 hourly prices ($/MWh), or an empty sequence

        Returns
        -------
        HourlyRevenueResult
            Empty dispatch and zero totals when prices is empty
        """
        prices = validate_hourly_prices(prices)
        cfg = self.config
        n = self.hours_per_cycle

        ledger = RevenueLedger()
        if not prices:
            return self._result([], ledger, [], [], 0)

        actions = ['idle'] * HOURS_PER_DAY
        used = set()
        charge_prices: List[float] = []
        discharge_prices: List[float] = []
        cycles_executed = 0
        start_hour = 0

        for cycle in range(self.num_cycles):
            available = [
                h for h in range(HOURS_PER_DAY)
                if h not in used and (self.cycle_mode == 'independent' or h >= start_hour)
            ]
            if len(available) < 2 * n:
                break

            if self.cycle_mode == 'sequential':
                plan = self._plan_sequential(prices, available, start_hour)
                if plan is None or plan.net_profit <= 0:
                    logger.debug("Cycle %d: no profitable split after hour %d, stopping",
                                 cycle, start_hour)
                    break
            else:
                plan = self._plan_independent(prices, available)
                if plan.net_profit <= 0:
                    logger.debug("Cycle %d skipped: net profit %.2f <= 0", cycle, plan.net_profit)
                    continue

            for h in plan.charge_hours:
                actions[h] = 'charge'
                used.add(h)
                charge_prices.append(prices[h])
            for h in plan.discharge_hours:
                actions[h] = 'discharge'
                used.add(h)
                discharge_prices.append(prices[h])

            ledger.post_discharge(plan.gross_revenue)
            ledger.post_charge(plan.charge_cost)
            ledger.post_vom(plan.vom_cost)
            cycles_executed += 1
            start_hour = max(plan.discharge_hours) + 1
            logger.debug("Cycle %d committed: charge %s, discharge %s, net %.2f",
                         cycle, plan.charge_hours, plan.discharge_hours, plan.net_profit)

        result = self._result(
            self._build_dispatch(prices, actions),
            ledger,
            charge_prices,
            discharge_prices,
            cycles_executed,
        )
        logger.info("Hourly dispatch (%s): %d cycle(s), net P&L $%.2f",
                    self.cycle_mode, cycles_executed, result.net_pnl)
        return result

    def _result(
        self,
        dispatch: List[HourlyDispatch],
        ledger: RevenueLedger,
        charge_prices: List[float],
        discharge_prices: List[float],
        cycles_executed: int
    ) -> HourlyRevenueResult:
        avg_charge = mean(charge_prices)
        avg_discharge = mean(discharge_prices)
        return HourlyRevenueResult(
            hourly_dispatch=dispatch,
            gross_revenue=ledger.gross_revenue,
            charging_cost=ledger.charging_cost,
            efficiency_loss=ledger.efficiency_loss(self.config.rte),
            vom_cost=ledger.vom_cost,
            net_pnl=ledger.net_revenue,
            daily_captured_spread=avg_discharge - avg_charge,
            avg_charge_price=avg_charge,
            avg_discharge_price=avg_discharge,
            cycles_executed=cycles_executed,
        )


def simulate_hourly(
    prices: Sequence[float],
    config: HourlyBatteryConfig,
    cycle_mode: str = DEFAULT_CYCLE_MODE
) -> HourlyRevenueResult:
    """Convenience wrapper: build an optimizer and run it once."""
    return HourlyDispatchOptimizer(config, cycle_mode).simulate(prices)
