"""
Unit tests for price file loaders.
ERCOT BESS Revenue Engine
"""

import numpy as np
import pandas as pd
import polars as pl
import pytest

from bess_revenue.core.battery.hourly_optimizer import simulate_hourly
from bess_revenue.core.data.loaders import (
    hourly_prices_from_frame,
    load_hourly_prices,
    load_price_file,
    load_rt_intervals,
    rt_intervals_from_frame,
)
from bess_revenue.core.errors import MalformedInputError
from bess_revenue.utils.data_validation import validate_rt_intervals


@pytest.fixture
def ercot_rt_frame():
    """One day of five-minute prices using ERCOT report column names."""
    rng = np.random.default_rng(7)
    return pd.DataFrame({
        'settlementPointPrice': np.round(rng.uniform(15, 80, 288), 2),
        'regUpMCPC': 8.0,
        'regDownMCPC': 4.0,
        'rrsMCPC': 10.0,
        'ecrsMCPC': 20.0,
        'nonSpinMCPC': 2.5,
    })


def test_rt_intervals_from_camel_case_frame(ercot_rt_frame):
    records = rt_intervals_from_frame(ercot_rt_frame)

    assert len(records) == 288
    assert records[0].time == '00:00'
    assert records[287].time == '23:55'
    assert records[13].hour == 1
    assert records[5].lmp == pytest.approx(ercot_rt_frame['settlementPointPrice'][5])
    assert records[5].ecrs_mcpc == 20.0
    assert validate_rt_intervals(records) == records


def test_rt_intervals_sorted_by_interval_column(ercot_rt_frame):
    shuffled = ercot_rt_frame.assign(interval=range(288)).sample(frac=1, random_state=3)
    records = rt_intervals_from_frame(shuffled)

    assert [r.interval for r in records] == list(range(288))
    assert records[42].lmp == pytest.approx(ercot_rt_frame['settlementPointPrice'][42])


def test_rt_csv_round_trip(tmp_path, ercot_rt_frame):
    path = tmp_path / 'rt_prices.csv'
    ercot_rt_frame.to_csv(path, index=False)

    records = load_rt_intervals(path)

    assert len(records) == 288
    assert records[100].non_spin_mcpc == 2.5


def test_rt_parquet_read_with_polars(tmp_path, ercot_rt_frame):
    path = tmp_path / 'rt_prices.parquet'
    pl.from_pandas(ercot_rt_frame).write_parquet(path)

    records = load_rt_intervals(path)

    assert len(records) == 288
    assert records[7].reg_up_mcpc == 8.0


def test_missing_price_column(ercot_rt_frame):
    with pytest.raises(MalformedInputError, match='ecrs_mcpc'):
        rt_intervals_from_frame(ercot_rt_frame.drop(columns=['ecrsMCPC']))


def test_non_numeric_price(ercot_rt_frame):
    bad = ercot_rt_frame.astype({'settlementPointPrice': object})
    bad.loc[10, 'settlementPointPrice'] = 'n/a'
    with pytest.raises(MalformedInputError, match='row 10'):
        rt_intervals_from_frame(bad)


def test_hourly_frame_ordered_by_hour_column():
    hours = list(range(24))[::-1]
    df = pd.DataFrame({'hour': hours, 'price': [h * 2.0 for h in hours]})

    records = hourly_prices_from_frame(df)

    assert [r.hour for r in records] == list(range(24))
    assert [r.price for r in records] == [h * 2.0 for h in range(24)]


def test_hourly_frame_duplicate_hours_rejected():
    df = pd.DataFrame({'hour': [0] * 24, 'price': 30.0})
    with pytest.raises(MalformedInputError):
        hourly_prices_from_frame(df)


def test_hourly_frame_wrong_length():
    with pytest.raises(MalformedInputError):
        hourly_prices_from_frame(pd.DataFrame({'price': [30.0] * 20}))


def test_load_hourly_prices_custom_column(tmp_path):
    path = tmp_path / 'dam.csv'
    pd.DataFrame({'lmp': np.linspace(20, 66, 24)}).to_csv(path, index=False)

    prices = load_hourly_prices(path, price_column='lmp')

    assert len(prices) == 24
    assert prices[0] == pytest.approx(20.0)
    assert prices[-1] == pytest.approx(66.0)


def test_unsupported_suffix(tmp_path):
    path = tmp_path / 'prices.xlsx'
    path.write_bytes(b'')
    with pytest.raises(MalformedInputError):
        load_price_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_price_file(tmp_path / 'nope.csv')


def test_hourly_records_feed_the_optimizer(hourly_prices, hourly_config):
    df = pd.DataFrame({'hour': range(24), 'price': hourly_prices})
    records = hourly_prices_from_frame(df)

    assert simulate_hourly(records, hourly_config) == simulate_hourly(hourly_prices, hourly_config)
