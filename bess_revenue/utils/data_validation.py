"""
Data Validation Utilities
ERCOT BESS Revenue Engine

Fail-fast checks for the price series handed to the optimizers. Unlike the
dashboard-style warning lists these raise MalformedInputError: the engine
never simulates against coerced input.
"""

import math
from typing import List, Sequence, Union

from ..config.settings import HOURS_PER_DAY, INTERVALS_PER_DAY, INTERVALS_PER_HOUR
from ..core.data.intervals import HourlyPrice, RTInterval, interval_label
from ..core.errors import MalformedInputError

AS_PRICE_FIELDS = (
    'reg_up_mcpc',
    'reg_down_mcpc',
    'rrs_mcpc',
    'ecrs_mcpc',
    'non_spin_mcpc',
)


def _check_price(value: object, where: str) -> float:
    """Return value as float, rejecting non-numeric, NaN, inf and negatives."""
    if isinstance(value, bool):
        raise MalformedInputError(f"{where}: expected a number, got {value!r}")
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"{where}: expected a number, got {value!r}") from exc
    if not math.isfinite(price):
        raise MalformedInputError(f"{where}: price must be finite, got {price}")
    if price < 0:
        raise MalformedInputError(f"{where}: price must be non-negative, got {price}")
    return price


def validate_hourly_prices(prices: Sequence[Union[float, HourlyPrice]]) -> List[float]:
    """
    Validate a day of hourly energy prices.

    Parameters
    ----------
    prices : sequence of float or HourlyPrice
        Either empty or exactly 24 prices ($/MWh), hour 0 first. HourlyPrice
        records must sit at their own hour.

    Returns
    -------
    list of float
        The prices as plain floats

    Raises
    ------
    MalformedInputError
        On wrong length or a NaN, infinite or negative price
    """
    if isinstance(prices, (str, bytes)):
        raise MalformedInputError("prices must be a sequence of numbers, not a string")
    values = list(prices)
    if values and len(values) != HOURS_PER_DAY:
        raise MalformedInputError(
            f"expected {HOURS_PER_DAY} hourly prices, got {len(values)}"
        )
    checked = []
    for h, p in enumerate(values):
        if isinstance(p, HourlyPrice):
            if p.hour != h:
                raise MalformedInputError(f"hour {h}: record is labelled hour {p.hour}")
            p = p.price
        checked.append(_check_price(p, f"hour {h}"))
    return checked


def validate_rt_intervals(intervals: Sequence[RTInterval]) -> List[RTInterval]:
    """
    Validate a day of five-minute price records.

    Each record must sit at its own position (interval == index), carry the
    matching hour and "HH:MM" label, and have finite, non-negative prices.

    Parameters
    ----------
    intervals : sequence of RTInterval
        Exactly 288 records

    Returns
    -------
    list of RTInterval

    Raises
    ------
    MalformedInputError
        On wrong length, wrong record type, misplaced records or bad prices
    """
    records = list(intervals)
    if len(records) != INTERVALS_PER_DAY:
        raise MalformedInputError(
            f"expected {INTERVALS_PER_DAY} five-minute intervals, got {len(records)}"
        )

    for idx, rec in enumerate(records):
        if not isinstance(rec, RTInterval):
            raise MalformedInputError(
                f"interval {idx}: expected RTInterval, got {type(rec).__name__}"
            )
        if rec.interval != idx:
            raise MalformedInputError(
                f"interval {idx}: record is labelled interval {rec.interval}"
            )
        if rec.hour != idx // INTERVALS_PER_HOUR:
            raise MalformedInputError(
                f"interval {idx}: hour {rec.hour} does not match interval index"
            )
        if rec.time != interval_label(idx):
            raise MalformedInputError(
                f"interval {idx}: time {rec.time!r} should be {interval_label(idx)!r}"
            )
        _check_price(rec.lmp, f"interval {idx} lmp")
        for name in AS_PRICE_FIELDS:
            _check_price(getattr(rec, name), f"interval {idx} {name}")

    return records
