import pandas as pd
import pytest

from blog_etl.errors import PipelineError, SchemaMismatch
from blog_etl.utils.validation import (
    aggregated_schema,
    check_data_quality,
    long_table_schema,
    validate_table,
    wide_table_schema,
)


def test_long_schema_rejects_duplicate_periods():
    df = pd.DataFrame({
        'fips': ['01001', '01001', '48001'],
        'period': [2010, 2010, 2010],
        'value': [1.0, 2.0, 3.0],
    })
    with pytest.raises(SchemaMismatch):
        validate_table(df, long_table_schema(['fips']), 'long', verbose=False)

    ok = df.drop_duplicates(subset=['fips', 'period'])
    assert validate_table(ok, long_table_schema(['fips']), 'long', verbose=False) is ok


def test_wide_schema_rejects_text_periods():
    df = pd.DataFrame({'fips': ['01001'], '2010': ['lots']})
    with pytest.raises(SchemaMismatch) as exc:
        validate_table(df, wide_table_schema(['fips'], ['2010']), 'wide', verbose=False)
    assert '2010' in exc.value.keys


def test_aggregated_schema_min_value():
    df = pd.DataFrame({'team': ['BOS', 'LAL'], 'share': [50.0, -1.0]})
    with pytest.raises(SchemaMismatch) as exc:
        validate_table(df, aggregated_schema(['team'], 'share', min_value=0), verbose=False)
    assert exc.value.keys == ['share']


def test_check_data_quality():
    df = pd.DataFrame({'k': ['a', 'a', 'b'], 'v': [None, None, 1.0]})
    quality = check_data_quality(df, 'test', key=['k'])
    assert quality['duplicate_keys'] == 1
    assert quality['missing_pct']['v'] == pytest.approx(200 / 3)


def test_error_messages_name_keys():
    err = SchemaMismatch('Bad table', keys=list(range(12)))
    assert isinstance(err, PipelineError)
    assert str(err) == 'Bad table [keys: 0, 1, 2, 3, 4, 5, 6, 7, 8, 9, ... (+2 more)]'
    assert str(SchemaMismatch('Bad table')) == 'Bad table'
