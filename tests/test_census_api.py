import pytest
import requests

from blog_etl.download import census_api, http
from blog_etl.download.census_api import (
    CensusQuery,
    build_params,
    fetch_census_table,
    fetch_census_years,
    parse_census_response,
    year_range,
)
from blog_etl.download.http import get_http_session, http_get
from blog_etl.errors import (
    InvalidParameter,
    MissingApiKey,
    SourceUnavailable,
)


FULTON = CensusQuery(
    dataset='acs/acs1',
    variables=['B01003_001E'],
    geography='county',
    state='13',
    county='121',
)


def test_year_range_excludes():
    assert year_range(2010, 2013, exclude=[2012]) == [2010, 2011, 2013]
    with pytest.raises(InvalidParameter):
        year_range(2022, 2010)


def test_build_params_county():
    params = build_params(FULTON, 'test-key')
    assert params == {
        'get': 'NAME,B01003_001E',
        'for': 'county:121',
        'in': 'state:13',
        'key': 'test-key',
    }


def test_build_params_tract_and_moe():
    query = CensusQuery('acs/acs5', ['B19013_001E'], geography='tract',
                        state='06', county='075', include_moe=True)
    params = build_params(query, 'k')
    assert params['get'] == 'NAME,B19013_001E,B19013_001M'
    assert params['for'] == 'tract:*'
    assert params['in'] == 'state:06 county:075'


def test_fetch_years_skips_excluded(census_session):
    years = year_range(2010, 2022, exclude=[2020])
    df = fetch_census_years(FULTON, reversed(years), session=census_session,
                            api_key='test-key', verbose=False)

    assert len(df) == 12
    assert df['year'].tolist() == years
    assert 2020 not in df['year'].tolist()
    assert (df['GEOID'] == '13121').all()
    assert df.loc[df['year'] == 2015, 'B01003_001E'].item() == 902015

    requested = [url.split('/')[4] for url, _ in census_session.calls]
    assert requested == [str(y) for y in years]


def test_unreleased_year_fails_before_any_request(census_session):
    with pytest.raises(InvalidParameter) as exc:
        fetch_census_years(FULTON, year_range(2010, 2022), session=census_session,
                           api_key='test-key', verbose=False)
    assert 2020 in exc.value.keys
    assert census_session.calls == []


def test_missing_api_key(monkeypatch, census_session):
    monkeypatch.delenv('CENSUS_API_KEY', raising=False)
    with pytest.raises(MissingApiKey) as exc:
        fetch_census_table(FULTON, 2015, session=census_session, verbose=False)

    assert isinstance(exc.value, SourceUnavailable)
    assert 'CENSUS_API_KEY' in str(exc.value)
    assert census_session.calls == []


def test_unknown_variable(make_session, make_response):
    session = make_session(lambda url, params: make_response(
        400, text="error: error: unknown variable 'B99999_999E'"
    ))
    query = CensusQuery('acs/acs5', ['B99999_999E'], state='13')
    with pytest.raises(InvalidParameter) as exc:
        fetch_census_table(query, 2019, session=session, api_key='k', verbose=False)
    assert 'B99999_999E' in exc.value.keys


def test_server_error_is_unavailable(make_session, make_response):
    session = make_session(lambda url, params: make_response(503, text='Service Unavailable'))
    with pytest.raises(SourceUnavailable) as exc:
        fetch_census_table(FULTON, 2019, session=session, api_key='k', verbose=False)
    assert 2019 in exc.value.keys


def test_non_json_body(make_session, make_response):
    session = make_session(lambda url, params: make_response(200, payload=None, text='<html>'))
    with pytest.raises(SourceUnavailable):
        fetch_census_table(FULTON, 2019, session=session, api_key='k', verbose=False)


def test_query_validation():
    with pytest.raises(InvalidParameter):
        fetch_census_table(CensusQuery('acs/acs5', ['b01003_001e']), 2019, api_key='k')
    with pytest.raises(InvalidParameter):
        fetch_census_table(CensusQuery('acs/acs5', ['B01003_001E'], geography='tract'),
                           2019, api_key='k')
    with pytest.raises(InvalidParameter):
        fetch_census_table(CensusQuery('acs/acs5', ['B01003_001E'], geography='zip'),
                           2019, api_key='k')
    with pytest.raises(InvalidParameter):
        fetch_census_table(CensusQuery('acs/acs5', ['B01003_001E']), 2005, api_key='k')


def test_parse_sentinels_and_labels():
    query = CensusQuery('acs/acs5', ['B19013_001E'], geography='county',
                        labels={'B19013_001E': 'median_income'})
    payload = [
        ['NAME', 'B19013_001E', 'state', 'county'],
        ['Loving County, Texas', '-666666666', '48', '301'],
        ['Travis County, Texas', '92731', '48', '453'],
    ]
    df = parse_census_response(payload, query, 2021)

    assert list(df.columns) == ['GEOID', 'NAME', 'state', 'county', 'median_income', 'year']
    assert df['GEOID'].tolist() == ['48301', '48453']
    assert df['median_income'].isna().tolist() == [True, False]
    assert (df['year'] == 2021).all()


def test_long_shape_with_moe(census_session):
    query = CensusQuery('acs/acs1', ['B01003_001E'], state='13', county='121',
                        include_moe=True, shape='long')
    df = fetch_census_table(query, 2019, session=census_session, api_key='k', verbose=False)

    assert len(df) == 1
    row = df.iloc[0]
    assert row['variable'] == 'B01003_001E'
    assert row['estimate'] == 902019
    assert row['moe'] == 902019
    assert row['year'] == 2019


def test_retry_session_policy():
    session = get_http_session()
    retry = session.get_adapter('https://api.census.gov/data').max_retries
    assert retry.total == 3
    assert 503 in retry.status_forcelist
    assert 429 in retry.status_forcelist


FULTON_PAYLOAD = [
    ['NAME', 'B01003_001E', 'state', 'county'],
    ['Fulton County, Georgia', '1066710', '13', '121'],
]


def test_retry_recovers_from_503(scripted_server, monkeypatch):
    server, base = scripted_server([503, 200], payload=FULTON_PAYLOAD)
    monkeypatch.setattr(census_api, 'CENSUS_API_BASE', base)

    with get_http_session(backoff=0) as session:
        df = fetch_census_table(FULTON, 2019, session=session, api_key='k', verbose=False)

    assert server.hits == 2
    assert len(df) == 1
    assert df['B01003_001E'].iloc[0] == 1066710


def test_retries_exhausted_is_unavailable(scripted_server, monkeypatch):
    server, base = scripted_server([503])
    monkeypatch.setattr(census_api, 'CENSUS_API_BASE', base)

    with get_http_session(total=2, backoff=0) as session:
        with pytest.raises(SourceUnavailable) as exc:
            fetch_census_table(FULTON, 2019, session=session, api_key='k', verbose=False)

    # first try + 2 retries
    assert server.hits == 3
    assert 2019 in exc.value.keys


class ClosingSession(requests.Session):

    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self):
        self.closed = True
        super().close()


def test_http_get_closes_its_own_session(scripted_server, monkeypatch):
    _, base = scripted_server([200], payload={'ok': True})
    opened = []

    def fake_session():
        opened.append(ClosingSession())
        return opened[-1]

    monkeypatch.setattr(http, 'get_http_session', fake_session)

    response = http_get(base + '/ping')
    assert response.json() == {'ok': True}
    assert len(opened) == 1 and opened[0].closed


def test_fetch_years_closes_its_own_session(census_session, monkeypatch):
    census_session.closed = False

    def close():
        census_session.closed = True

    census_session.close = close
    monkeypatch.setattr(census_api, 'get_http_session', lambda: census_session)

    df = fetch_census_years(FULTON, [2018, 2019], api_key='k', verbose=False)
    assert df['year'].tolist() == [2018, 2019]
    assert census_session.closed
