"""
Price Data Loaders
ERCOT BESS Revenue Engine

Adapts tabular price data (DataFrames, CSV or Parquet files) into the typed
records consumed by the optimizers. This is the only place that knows about
column names; missing or non-numeric columns raise MalformedInputError
instead of being filled with defaults.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

import pandas as pd
import polars as pl

from ...config.settings import HOURS_PER_DAY, INTERVALS_PER_HOUR
from ..errors import MalformedInputError
from .intervals import HourlyPrice, RTInterval, interval_label

logger = logging.getLogger(__name__)

# ERCOT public report names -> record fields
RT_COLUMN_ALIASES: Dict[str, str] = {
    'regUpMCPC': 'reg_up_mcpc',
    'regDownMCPC': 'reg_down_mcpc',
    'rrsMCPC': 'rrs_mcpc',
    'ecrsMCPC': 'ecrs_mcpc',
    'nonSpinMCPC': 'non_spin_mcpc',
    'settlementPointPrice': 'lmp',
}

RT_PRICE_COLUMNS = [
    'lmp',
    'reg_up_mcpc',
    'reg_down_mcpc',
    'rrs_mcpc',
    'ecrs_mcpc',
    'non_spin_mcpc',
]


def load_price_file(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a price table from disk.

    Parameters
    ----------
    path : str or Path
        ``.csv`` (read with pandas) or ``.parquet`` (read with polars)

    Returns
    -------
    pd.DataFrame
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == '.csv':
        df = pd.read_csv(path)
    elif suffix == '.parquet':
        df = pl.read_parquet(path).to_pandas()
    else:
        raise MalformedInputError(f"Unsupported price file format: {path.suffix}")

    logger.debug("Loaded %d rows from %s", len(df), path)
    return df


def _numeric_column(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        raise MalformedInputError(f"missing required column '{column}'")
    values = pd.to_numeric(df[column], errors='coerce')
    bad = values.isna()
    if bad.any():
        first = int(bad.to_numpy().nonzero()[0][0])
        raise MalformedInputError(
            f"column '{column}' has a missing or non-numeric value at row {first}"
        )
    return values


def hourly_prices_from_frame(df: pd.DataFrame, price_column: str = 'price') -> List[HourlyPrice]:
    """
    Convert a DataFrame of hourly prices into HourlyPrice records.

    Rows are ordered by an ``hour`` column when present, otherwise taken in
    row order as hours 0-23.
    """
    if len(df) != HOURS_PER_DAY:
        raise MalformedInputError(f"expected {HOURS_PER_DAY} hourly rows, got {len(df)}")

    if 'hour' in df.columns:
        hours = _numeric_column(df, 'hour').astype(int)
        if sorted(hours.tolist()) != list(range(HOURS_PER_DAY)):
            raise MalformedInputError("'hour' column must contain each hour 0-23 exactly once")
        df = df.assign(hour=hours).sort_values('hour')
    else:
        df = df.assign(hour=range(HOURS_PER_DAY))

    prices = _numeric_column(df, price_column)
    return [
        HourlyPrice(hour=int(h), price=float(p))
        for h, p in zip(df['hour'], prices)
    ]


def rt_intervals_from_frame(df: pd.DataFrame) -> List[RTInterval]:
    """
    Convert a DataFrame of five-minute prices into RTInterval records.

    Accepts snake_case columns or ERCOT camelCase names (``regUpMCPC``, ...).
    ``interval`` defaults to row order; ``hour`` and ``time`` are derived
    from the interval index when absent.
    """
    df = df.rename(columns=RT_COLUMN_ALIASES)

    if 'interval' in df.columns:
        df = df.assign(interval=_numeric_column(df, 'interval').astype(int)).sort_values('interval')
    else:
        df = df.assign(interval=range(len(df)))
    if 'hour' not in df.columns:
        df = df.assign(hour=df['interval'] // INTERVALS_PER_HOUR)
    if 'time' not in df.columns:
        df = df.assign(time=[interval_label(int(i)) for i in df['interval']])

    prices = {col: _numeric_column(df, col) for col in RT_PRICE_COLUMNS}
    hours = _numeric_column(df, 'hour').astype(int)

    records = []
    for pos, (interval, hour, time) in enumerate(zip(df['interval'], hours, df['time'])):
        records.append(RTInterval(
            interval=int(interval),
            time=str(time),
            hour=int(hour),
            **{col: float(prices[col].iloc[pos]) for col in RT_PRICE_COLUMNS},
        ))
    return records


def load_hourly_prices(path: Union[str, Path], price_column: str = 'price') -> List[float]:
    """Load one day of hourly prices from a file as a plain list for simulate_hourly()."""
    return [rec.price for rec in hourly_prices_from_frame(load_price_file(path), price_column)]


def load_rt_intervals(path: Union[str, Path]) -> List[RTInterval]:
    """Load one day of five-minute price records from a file."""
    return rt_intervals_from_frame(load_price_file(path))
