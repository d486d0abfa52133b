"""
Battery Configuration Classes
ERCOT BESS Revenue Engine

This module defines the immutable battery configurations consumed by the
hourly optimizer and the energy + ancillary service co-optimizer.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Optional

from ...config.settings import DEFAULT_INITIAL_SOC
from ..errors import ArithmeticDegenerateError, InvalidConfigurationError


def _require_number(name: str, value: object) -> float:
    """Return value as float; non-numeric values raise InvalidConfigurationError."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfigurationError(
            f"{name} must be a number, got {type(value).__name__} {value!r}"
        )
    return float(value)


def _require_positive(name: str, value: float) -> None:
    number = _require_number(name, value)
    if not (math.isfinite(number) and number > 0):
        raise InvalidConfigurationError(f"{name} must be positive, got {value!r}")


def _require_non_negative(name: str, value: float) -> None:
    number = _require_number(name, value)
    if not (math.isfinite(number) and number >= 0):
        raise InvalidConfigurationError(f"{name} must be non-negative, got {value!r}")


def _require_fraction(name: str, value: float, lower: float, upper: float,
                      upper_inclusive: bool = False) -> None:
    number = _require_number(name, value)
    in_range = lower <= number <= upper if upper_inclusive else lower <= number < upper
    if not in_range:
        bracket = ']' if upper_inclusive else ')'
        raise InvalidConfigurationError(
            f"{name} must be in [{lower:g}, {upper:g}{bracket}, got {value!r}"
        )


def _require_rte(value: float) -> None:
    number = _require_number("rte", value)
    if number == 0:
        raise ArithmeticDegenerateError("rte must be greater than 0 (division by zero)")
    if not 0 < number <= 1:
        raise InvalidConfigurationError(f"rte must be in (0, 1], got {value!r}")


@dataclass(frozen=True)
class HourlyBatteryConfig:
    """
    Battery specifications for hourly day-ahead arbitrage.

    Attributes
    ----------
    power_mw : float
        Maximum charge/discharge rate (MW)
    duration_hours : float
        Hours of storage at full power; energy capacity = power x duration
    rte : float
        Round-trip efficiency (0 to 1]
    cycles_per_day : int
        Daily cycle budget. Zero is accepted and treated as one cycle.
    vom : float
        Variable O&M cost ($/MWh of throughput)
    """
    power_mw: float
    duration_hours: float
    rte: float
    cycles_per_day: int = 1
    vom: float = 0.0

    def __post_init__(self):
        """Validate specifications."""
        _require_positive("power_mw", self.power_mw)
        _require_positive("duration_hours", self.duration_hours)
        _require_rte(self.rte)
        if (isinstance(self.cycles_per_day, bool)
                or not isinstance(self.cycles_per_day, numbers.Integral)):
            raise InvalidConfigurationError(
                f"cycles_per_day must be an integer, got {self.cycles_per_day!r}"
            )
        if self.cycles_per_day < 0:
            raise InvalidConfigurationError("cycles_per_day must be non-negative")
        _require_non_negative("vom", self.vom)

    @property
    def energy_capacity_mwh(self) -> float:
        """Energy capacity at full power for the rated duration."""
        return self.power_mw * self.duration_hours


@dataclass(frozen=True)
class BatteryConfig:
    """
    Battery specifications for 5-minute energy and AS co-optimization.

    Attributes
    ----------
    power_capacity_mw : float
        Maximum MW in or out
    energy_capacity_mwh : float
        Total usable storage (MWh), independent of power
    rte : float
        Round-trip efficiency (0 to 1]. Applied as sqrt(rte) on both
        charge and discharge.
    min_soc : float, optional
        SoC floor as fraction (default: 0.05 = 5%)
    variable_om : float, optional
        Variable O&M cost ($/MWh of throughput)
    initial_soc : float, optional
        Starting SoC as fraction. When omitted the battery starts at 50%,
        or at min_soc if the floor is higher.
    """
    power_capacity_mw: float
    energy_capacity_mwh: float
    rte: float
    min_soc: float = 0.05
    variable_om: float = 0.0
    initial_soc: Optional[float] = None

    def __post_init__(self):
        """Validate specifications."""
        _require_positive("power_capacity_mw", self.power_capacity_mw)
        _require_positive("energy_capacity_mwh", self.energy_capacity_mwh)
        _require_rte(self.rte)
        _require_fraction("min_soc", self.min_soc, 0, 1)
        _require_non_negative("variable_om", self.variable_om)
        if self.initial_soc is not None:
            _require_fraction("initial_soc", self.initial_soc, self.min_soc, 1,
                              upper_inclusive=True)

    @property
    def starting_soc(self) -> float:
        """SoC fraction at the start of the day."""
        if self.initial_soc is not None:
            return self.initial_soc
        return max(DEFAULT_INITIAL_SOC, self.min_soc)

    @property
    def one_way_efficiency(self) -> float:
        """Single-direction efficiency (sqrt of round-trip)."""
        return self.rte ** 0.5

    @property
    def duration_hours(self) -> float:
        """Battery duration in hours at full power."""
        return self.energy_capacity_mwh / self.power_capacity_mw

    @property
    def reservable_energy_mwh(self) -> float:
        """Energy above the SoC floor that AS commitments may hold back."""
        return (1 - self.min_soc) * self.energy_capacity_mwh
