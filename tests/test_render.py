import numpy as np
import pandas as pd
import pytest

from blog_etl.datasets import build_tooltip, finalize_for_render
from blog_etl.errors import SchemaMismatch


@pytest.fixture
def peaks():
    return pd.DataFrame({
        'fips': ['01001', '06001', '48001'],
        'county': ['Autauga County', 'Alameda County', 'Anderson County'],
        'region': ['South', 'West', 'South'],
        'peak_period': [2010, 2000, 2020],
        'peak_population': [150000.0, 300000.0, 70000.0],
        'pct_of_peak': [80.0, 66.7, 100.0],
    })


def test_finalize_channels(peaks):
    out = finalize_for_render(peaks, x='peak_period', y='pct_of_peak', color='region',
                              tooltip=['county', 'peak_period', 'peak_population'],
                              key='fips')

    assert list(out.columns) == ['x', 'y', 'color', 'tooltip', 'fips']
    assert out['x'].tolist() == [2010, 2000, 2020]
    assert out['fips'].tolist() == ['01001', '06001', '48001']
    assert out['tooltip'].iloc[0] == (
        'county: Autauga County<br>peak_period: 2010<br>peak_population: 150,000'
    )


def test_tooltip_labels(peaks):
    tip = build_tooltip(peaks, ['pct_of_peak'], labels={'pct_of_peak': '% of peak'}, sep=' | ')
    assert tip.tolist() == ['% of peak: 80', '% of peak: 66.70', '% of peak: 100']


def test_null_position_rejected(peaks):
    peaks.loc[1, 'pct_of_peak'] = np.nan
    with pytest.raises(SchemaMismatch) as exc:
        finalize_for_render(peaks, x='peak_period', y='pct_of_peak')
    assert exc.value.keys == [1]


def test_duplicate_units_rejected(peaks):
    peaks['peak_period'] = 2010
    with pytest.raises(SchemaMismatch):
        finalize_for_render(peaks, x='peak_period', y='pct_of_peak', color='region')


def test_expected_rows(peaks):
    finalize_for_render(peaks, x='fips', y='pct_of_peak', expected_rows=3)
    with pytest.raises(SchemaMismatch):
        finalize_for_render(peaks, x='fips', y='pct_of_peak', expected_rows=4)


def test_missing_channel_column(peaks):
    with pytest.raises(SchemaMismatch) as exc:
        finalize_for_render(peaks, x='year', y='pct_of_peak')
    assert exc.value.keys == ['year']
