"""
Price Interval Records
ERCOT BESS Revenue Engine

Strongly-typed price observations handed to the optimizers. Producers (file
loaders, API adapters, synthetic generators) build these; the engine never
inspects raw column layouts.
"""

from dataclasses import asdict, dataclass

from ...config.settings import INTERVALS_PER_HOUR


def interval_label(interval: int, intervals_per_hour: int = INTERVALS_PER_HOUR) -> str:
    """Clock label ("HH:MM") for the start of a within-day interval."""
    hour, slot = divmod(interval, intervals_per_hour)
    minute = slot * (60 // intervals_per_hour)
    return f"{hour:02d}:{minute:02d}"


@dataclass(frozen=True)
class HourlyPrice:
    """Hourly day-ahead energy price ($/MWh)."""
    hour: int
    price: float


@dataclass(frozen=True)
class RTInterval:
    """
    Five-minute real-time price record.

    Attributes
    ----------
    interval : int
        Interval of day, 0-287
    time : str
        Interval start, "HH:MM"
    hour : int
        Hour of day, 0-23
    lmp : float
        Real-time nodal energy price ($/MWh)
    reg_up_mcpc, reg_down_mcpc, rrs_mcpc, ecrs_mcpc, non_spin_mcpc : float
        Hourly AS clearing prices ($/MW-h), repeated on each interval
        of the hour
    """
    interval: int
    time: str
    hour: int
    lmp: float
    reg_up_mcpc: float = 0.0
    reg_down_mcpc: float = 0.0
    rrs_mcpc: float = 0.0
    ecrs_mcpc: float = 0.0
    non_spin_mcpc: float = 0.0

    @classmethod
    def at(cls, interval: int, lmp: float, **as_prices: float) -> 'RTInterval':
        """Build a record whose time label and hour follow from the interval index."""
        return cls(
            interval=interval,
            time=interval_label(interval),
            hour=interval // INTERVALS_PER_HOUR,
            lmp=lmp,
            **as_prices,
        )

    def mcpc(self, product: str) -> float:
        """Clearing price for an AS product key ('reg_up', 'ecrs', ...)."""
        return getattr(self, f"{product}_mcpc")

    def as_dict(self) -> dict:
        return asdict(self)
