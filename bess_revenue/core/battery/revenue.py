"""
Revenue Aggregation
ERCOT BESS Revenue Engine

Both optimizers post per-step cash flows to a RevenueLedger, which keeps
named category totals and derives gross and net figures.
"""

from dataclasses import dataclass, field
from typing import Dict

AS_CATEGORIES = ('reg_up', 'reg_down', 'rrs', 'ecrs', 'non_spin')


@dataclass
class RevenueLedger:
    """
    Running totals of one simulation's cash flows ($).

    Attributes
    ----------
    discharge_revenue : float
        Energy sold to the grid
    charging_cost : float
        Energy bought from the grid
    vom_cost : float
        Variable O&M on throughput
    ancillary : dict
        Capacity payments keyed by AS product
    """
    discharge_revenue: float = 0.0
    charging_cost: float = 0.0
    vom_cost: float = 0.0
    ancillary: Dict[str, float] = field(
        default_factory=lambda: {name: 0.0 for name in AS_CATEGORIES}
    )

    def post_discharge(self, revenue: float) -> None:
        self.discharge_revenue += revenue

    def post_charge(self, cost: float) -> None:
        self.charging_cost += cost

    def post_vom(self, cost: float) -> None:
        self.vom_cost += cost

    def post_ancillary(self, product: str, revenue: float) -> None:
        if product not in self.ancillary:
            raise KeyError(f"Unknown ancillary service product: {product}")
        self.ancillary[product] += revenue

    @property
    def energy_revenue(self) -> float:
        """Net energy arbitrage (discharge revenue less charging cost)."""
        return self.discharge_revenue - self.charging_cost

    @property
    def as_revenue(self) -> float:
        return sum(self.ancillary.values())

    @property
    def gross_revenue(self) -> float:
        """Revenue before costs: energy sold plus AS capacity payments."""
        return self.discharge_revenue + self.as_revenue

    @property
    def net_revenue(self) -> float:
        return self.gross_revenue - self.charging_cost - self.vom_cost

    def efficiency_loss(self, rte: float) -> float:
        """Share of charging spend lost to round-trip inefficiency."""
        return self.charging_cost * (1 - rte)
