import numpy as np
import pandas as pd
import pytest

from blog_etl.errors import InvalidParameter, SchemaMismatch
from blog_etl.transform import (
    aggregate,
    aggregate_max,
    aggregate_sum,
    long_to_wide,
    wide_to_long,
)


@pytest.fixture
def wide():
    return pd.DataFrame({
        'fips': ['01001', '48001'],
        '2000': [100.0, 50.0],
        '2010': [np.nan, 60.0],
        '2020': [120.0, 70.0],
    })


def test_wide_to_long(wide):
    long = wide_to_long(wide, ['fips'], period_name='period', value_name='population')

    assert list(long.columns) == ['fips', 'period', 'population']
    assert len(long) == 6
    assert long['period'].tolist() == [2000, 2010, 2020, 2000, 2010, 2020]
    assert long['fips'].tolist() == ['01001'] * 3 + ['48001'] * 3
    assert pd.isna(long.loc[1, 'population'])


def test_reshape_round_trip(wide):
    long = wide_to_long(wide, ['fips'])
    back = long_to_wide(long, ['fips'])
    pd.testing.assert_frame_equal(back, wide, check_dtype=False)


def test_round_trip_keeps_integer_labels():
    wide = pd.DataFrame({'fips': ['01001', '48001'], 2000: [100.0, 50.0], 2010: [110.0, 60.0]})

    back = long_to_wide(wide_to_long(wide, ['fips']), ['fips'])

    assert list(back.columns) == ['fips', 2000, 2010]
    pd.testing.assert_frame_equal(back, wide, check_dtype=False)


def test_round_trip_mixed_labels():
    wide = pd.DataFrame({
        'fips': ['01001', '48001'],
        '2010': [1.0, 2.0],
        '2020': [3.0, np.nan],
        'est_2023': [5.0, 6.0],
    })

    long = wide_to_long(wide, ['fips'])
    assert long['period'].tolist()[:3] == [2010, 2020, 'est_2023']

    back = long_to_wide(long, ['fips'])
    assert list(back.columns) == ['fips', '2010', '2020', 'est_2023']
    pd.testing.assert_frame_equal(back, wide, check_dtype=False)


def test_long_to_wide_without_labels_uses_str():
    long = pd.DataFrame({'fips': ['a', 'a'], 'period': [2010, 2000], 'value': [2.0, 1.0]})
    back = long_to_wide(long, ['fips'])
    assert list(back.columns) == ['fips', '2000', '2010']


def test_reshape_errors(wide):
    with pytest.raises(SchemaMismatch):
        wide_to_long(wide[['fips']], ['fips'])
    with pytest.raises(SchemaMismatch):
        wide_to_long(wide.rename(columns={'fips': 'period'}), ['period'])

    long = wide_to_long(wide, ['fips'])
    doubled = pd.concat([long, long.iloc[[0]]], ignore_index=True)
    with pytest.raises(SchemaMismatch) as exc:
        long_to_wide(doubled, ['fips'])
    assert ('01001', 2000) in exc.value.keys


def test_aggregate_max_earliest_period_wins():
    df = pd.DataFrame({
        'entity': ['A', 'A', 'A'],
        'period': [1, 2, 3],
        'value': [10, 30, 30],
    })
    result = aggregate_max(df, ['entity'])

    assert len(result) == 1
    assert result.iloc[0].tolist() == ['A', 2, 30]


def test_aggregate_max_ignores_input_order_and_nulls():
    df = pd.DataFrame({
        'entity': ['B', 'A', 'B', 'A', 'B'],
        'period': [2020, 2010, 1990, 2000, 2000],
        'value': [5.0, 7.0, 9.0, 7.0, np.nan],
    })
    result = aggregate_max(df, ['entity'])

    assert result['entity'].tolist() == ['A', 'B']
    assert result['period'].tolist() == [2000, 1990]
    assert result['value'].tolist() == [7.0, 9.0]


def test_aggregate_sum():
    df = pd.DataFrame({
        'team': ['BOS', 'BOS', 'LAL'],
        'pts': [2000.0, 1000.0, 1500.0],
    })
    result = aggregate_sum(df, ['team'], values='pts')
    assert result.set_index('team')['pts'].to_dict() == {'BOS': 3000.0, 'LAL': 1500.0}


def test_aggregate_dispatch():
    df = pd.DataFrame({'k': ['a', 'a'], 'period': [1, 2], 'value': [1.0, 2.0]})
    assert aggregate(df, ['k'], 'max')['period'].item() == 2
    assert aggregate(df, ['k'], 'sum')['value'].item() == 3.0
    with pytest.raises(InvalidParameter):
        aggregate(df, ['k'], 'median')
