"""
Energy + Ancillary Service Co-Optimizer
ERCOT BESS Revenue Engine

Two-pass 5-minute dispatch:

1. Hourly AS commitment. For each hour, offer a fixed share of power
   capacity into each ancillary service product whose clearing price beats
   its opportunity cost. Reserve products (ECRS, RRS) must also hold back
   energy for their full obligation window.
2. Energy dispatch. Walk the 288 intervals, discharging whenever LMP clears
   the VOM break-even and charging in the cheapest quartile, using only the
   SoC left over after AS hold-backs.

AS awards earn capacity payments only. Deployment (activation) of committed
capacity is not modeled and never moves SoC.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Literal, Sequence

import pandas as pd

from ...config.settings import (
    AS_PRODUCTS,
    CHARGE_THRESHOLD_PERCENTILE,
    HOURS_PER_DAY,
    INTERVAL_HOURS,
    INTERVALS_PER_DAY,
    INTERVALS_PER_HOUR,
)
from ...utils.data_validation import validate_rt_intervals
from ...utils.numerics import clamp, median, percentile
from ..data.intervals import RTInterval
from .battery import BatteryConfig
from .revenue import AS_CATEGORIES, RevenueLedger

logger = logging.getLogger(__name__)


@dataclass
class DispatchInterval:
    """
    Dispatch outcome for one 5-minute interval.

    Carries the input price record plus MW awards per product, the SoC at the
    end of the interval (0-100%), the share of capacity held back for AS
    obligations (%), and the interval's cash flows ($).
    """
    interval: int
    time: str
    hour: int
    lmp: float
    reg_up_mcpc: float
    reg_down_mcpc: float
    rrs_mcpc: float
    ecrs_mcpc: float
    non_spin_mcpc: float
    discharge_mw: float
    charge_mw: float
    reg_up_mw: float
    reg_down_mw: float
    rrs_mw: float
    ecrs_mw: float
    non_spin_mw: float
    soc: float
    soc_reserved: float
    energy_revenue: float
    as_revenue: float
    vom_cost: float

    @property
    def action(self) -> Literal['charge', 'discharge', 'idle']:
        if self.discharge_mw > 0:
            return 'discharge'
        if self.charge_mw > 0:
            return 'charge'
        return 'idle'


@dataclass
class CoOptimizationResult:
    """Interval dispatch and revenue waterfall ($) of the co-optimizer."""
    dispatch: List[DispatchInterval]
    energy_revenue: float
    reg_up_revenue: float
    reg_down_revenue: float
    rrs_revenue: float
    ecrs_revenue: float
    non_spin_revenue: float
    gross_revenue: float
    charging_cost: float
    vom_cost: float
    net_revenue: float
    discharge_revenue: float
    as_revenue: float
    efficiency_loss: float

    def to_dataframe(self) -> pd.DataFrame:
        """Interval-by-interval dispatch as a DataFrame (288 rows)."""
        df = pd.DataFrame([asdict(d) for d in self.dispatch])
        if not df.empty:
            df['action'] = [d.action for d in self.dispatch]
        return df


@dataclass
class ASCommitments:
    """
    Outcome of the hourly AS commitment pass.

    Attributes
    ----------
    charge_threshold : float
        LMP below which energy charging is allowed ($/MWh)
    awards_mw : dict
        Committed MW per interval, keyed by AS product
    reserved_mwh : list of float
        Energy held back above the SoC floor at each interval (MWh)
    """
    charge_threshold: float
    awards_mw: Dict[str, List[float]] = field(
        default_factory=lambda: {name: [0.0] * INTERVALS_PER_DAY for name in AS_CATEGORIES}
    )
    reserved_mwh: List[float] = field(default_factory=lambda: [0.0] * INTERVALS_PER_DAY)


class CoOptimizer:
    """
    Energy arbitrage co-optimized with ERCOT ancillary services.

    Attributes
    ----------
    config : BatteryConfig
        Battery specifications
    """

    def __init__(self, config: BatteryConfig):
        self.config = config

    def _is_economic(
        self,
        product: str,
        mcpc: float,
        lmp_median: float,
        charge_threshold: float
    ) -> bool:
        """Whether an AS product's clearing price beats its opportunity cost."""
        params = AS_PRODUCTS[product]
        if 'lmp_multiplier' in params:
            return mcpc > lmp_median * self.config.rte * params['lmp_multiplier']
        if 'vom_multiplier' in params:
            return mcpc > self.config.variable_om * params['vom_multiplier']
        # Reg-down pays to absorb energy; offer it when already in charging territory
        return lmp_median < charge_threshold

    def _reserve(
        self,
        commitments: ASCommitments,
        product: str,
        start: int,
        award_mw: float
    ) -> bool:
        """
        Award a product from interval ``start`` onward if its energy hold fits.

        The hold window covers ``hold_hours`` of intervals (truncated at the end
        of the day) and needs award_mw x hold_hours MWh of headroom at every
        interval in it. Products without a hold are awarded for one hour.
        """
        hold_hours = AS_PRODUCTS[product]['hold_hours']
        if hold_hours == 0:
            for k in range(start, start + INTERVALS_PER_HOUR):
                commitments.awards_mw[product][k] = award_mw
            return True

        window = range(start, min(start + hold_hours * INTERVALS_PER_HOUR, INTERVALS_PER_DAY))
        energy_needed = award_mw * hold_hours
        reservable = self.config.reservable_energy_mwh
        for k in window:
            if energy_needed > reservable - commitments.reserved_mwh[k]:
                return False
        for k in window:
            commitments.awards_mw[product][k] = award_mw
            commitments.reserved_mwh[k] += energy_needed
        return True

    def commit_ancillary(self, intervals: Sequence[RTInterval]) -> ASCommitments:
        """
        Pass 1: hourly AS commitment with SoC reservation.

        Parameters
        ----------
        intervals : sequence of RTInterval
            Validated 288-interval day

        Returns
        -------
        ASCommitments
        """
        charge_threshold = percentile([iv.lmp for iv in intervals], CHARGE_THRESHOLD_PERCENTILE)
        commitments = ASCommitments(charge_threshold=charge_threshold)

        for hour in range(HOURS_PER_DAY):
            start = hour * INTERVALS_PER_HOUR
            hour_intervals = intervals[start:start + INTERVALS_PER_HOUR]
            lmp_median = median([iv.lmp for iv in hour_intervals])
            # AS prices clear hourly; the first interval carries the hour's price
            first = hour_intervals[0]

            for product, params in AS_PRODUCTS.items():
                if not self._is_economic(product, first.mcpc(product), lmp_median,
                                         charge_threshold):
                    continue
                award_mw = self.config.power_capacity_mw * params['commit_fraction']
                if self._reserve(commitments, product, start, award_mw):
                    logger.debug("Hour %02d: committed %.2f MW %s", hour, award_mw, product)
                else:
                    logger.debug("Hour %02d: %s economic but no SoC headroom", hour, product)

        return commitments

    def dispatch_energy(
        self,
        intervals: Sequence[RTInterval],
        commitments: ASCommitments
    ) -> CoOptimizationResult:
        """
        Pass 2: per-interval energy dispatch on the SoC left after AS hold-backs.

        Parameters
        ----------
        intervals : sequence of RTInterval
            Validated 288-interval day
        commitments : ASCommitments
            Output of commit_ancillary()

        Returns
        -------
        CoOptimizationResult
        """
        cfg = self.config
        dt = INTERVAL_HOURS
        eff = cfg.one_way_efficiency
        capacity = cfg.energy_capacity_mwh
        break_even = cfg.variable_om / cfg.rte

        ledger = RevenueLedger()
        dispatch: List[DispatchInterval] = []
        soc = cfg.starting_soc * 100

        for i, iv in enumerate(intervals):
            reserved_pct = commitments.reserved_mwh[i] / capacity * 100
            awards = {name: commitments.awards_mw[name][i] for name in AS_CATEGORIES}

            # Headroom in MW at the grid side of the inverter
            discharge_mwh = max(0.0, (soc / 100 - cfg.min_soc - reserved_pct / 100) * capacity)
            avail_discharge = clamp(discharge_mwh * eff / dt, 0.0, cfg.power_capacity_mw)
            charge_mwh = max(0.0, (1 - soc / 100) * capacity)
            avail_charge = clamp(charge_mwh / eff / dt, 0.0, cfg.power_capacity_mw)

            discharge_mw = 0.0
            charge_mw = 0.0
            if iv.lmp > break_even and avail_discharge > 0:
                discharge_mw = avail_discharge
            elif iv.lmp < commitments.charge_threshold and avail_charge > 0:
                charge_mw = avail_charge

            soc += charge_mw * eff * dt / capacity * 100
            soc -= discharge_mw / eff * dt / capacity * 100
            soc = clamp(soc, cfg.min_soc * 100, 100.0)

            ledger.post_discharge(discharge_mw * iv.lmp * dt)
            ledger.post_charge(charge_mw * iv.lmp * dt)
            vom_cost = (discharge_mw + charge_mw) * cfg.variable_om * dt
            ledger.post_vom(vom_cost)

            as_revenue = 0.0
            for name, mw in awards.items():
                revenue = mw * iv.mcpc(name) * dt
                ledger.post_ancillary(name, revenue)
                as_revenue += revenue

            dispatch.append(DispatchInterval(
                **iv.as_dict(),
                discharge_mw=discharge_mw,
                charge_mw=charge_mw,
                reg_up_mw=awards['reg_up'],
                reg_down_mw=awards['reg_down'],
                rrs_mw=awards['rrs'],
                ecrs_mw=awards['ecrs'],
                non_spin_mw=awards['non_spin'],
                soc=soc,
                soc_reserved=reserved_pct,
                energy_revenue=(discharge_mw - charge_mw) * iv.lmp * dt,
                as_revenue=as_revenue,
                vom_cost=vom_cost,
            ))

        return CoOptimizationResult(
            dispatch=dispatch,
            energy_revenue=ledger.energy_revenue,
            reg_up_revenue=ledger.ancillary['reg_up'],
            reg_down_revenue=ledger.ancillary['reg_down'],
            rrs_revenue=ledger.ancillary['rrs'],
            ecrs_revenue=ledger.ancillary['ecrs'],
            non_spin_revenue=ledger.ancillary['non_spin'],
            gross_revenue=ledger.gross_revenue,
            charging_cost=ledger.charging_cost,
            vom_cost=ledger.vom_cost,
            net_revenue=ledger.net_revenue,
            discharge_revenue=ledger.discharge_revenue,
            as_revenue=ledger.as_revenue,
            efficiency_loss=ledger.efficiency_loss(cfg.rte),
        )

    def simulate(self, intervals: Sequence[RTInterval]) -> CoOptimizationResult:
        """Validate the day's intervals and run both passes."""
        intervals = validate_rt_intervals(intervals)
        commitments = self.commit_ancillary(intervals)
        result = self.dispatch_energy(intervals, commitments)
        logger.info(
            "Co-optimized dispatch: energy $%.2f, AS $%.2f, net $%.2f",
            result.energy_revenue, result.as_revenue, result.net_revenue,
        )
        return result


def simulate_co_optimized(
    intervals: Sequence[RTInterval],
    config: BatteryConfig
) -> CoOptimizationResult:
    """Convenience wrapper: build a co-optimizer and run it once."""
    return CoOptimizer(config).simulate(intervals)
