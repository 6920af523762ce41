#!/usr/bin/env python3
"""
Census Data API client

Pulls ACS / decennial estimates for a geography level, one request per
year, and returns a typed table tagged with its originating year.

API Documentation: https://www.census.gov/data/developers/guidance/api-user-guide.html

Usage:
    from blog_etl.download.census_api import CensusQuery, fetch_census_years, year_range

    query = CensusQuery(
        dataset='acs/acs1',
        variables=['B01003_001E'],
        geography='county',
        state='13',
        county='121',
    )
    df = fetch_census_years(query, year_range(2010, 2022, exclude=[2020]))

Get an API key at: https://api.census.gov/data/key_signup.html
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd
import requests

from config.settings import (
    CENSUS_API_BASE, CENSUS_DATASET_FIRST_YEAR, CENSUS_DATASET_MISSING_YEARS,
    CENSUS_NULL_SENTINELS, REQUEST_TIMEOUT, get_census_api_key
)
from blog_etl.download.http import get_http_session, http_get
from blog_etl.errors import (
    InvalidParameter, MissingApiKey, SourceUnavailable
)

# Geography level -> (response columns that make up GEOID, zero-pad widths)
GEOGRAPHY_LEVELS = {
    'state': (['state'], [2]),
    'county': (['state', 'county'], [2, 3]),
    'tract': (['state', 'county', 'tract'], [2, 3, 6]),
}

VARIABLE_PATTERN = re.compile(r'^[A-Z][A-Z0-9]*(_[A-Z0-9]+)*$')
UNKNOWN_VARIABLE_PATTERN = re.compile(r"unknown variable '([^']+)'", re.IGNORECASE)


@dataclass(frozen=True)
class CensusQuery:
    """Parameters of one Census API pull (everything except the year)"""
    dataset: str
    variables: List[str]
    geography: str = 'county'
    state: Optional[str] = None
    county: Optional[str] = None
    include_moe: bool = False
    shape: str = 'wide'
    labels: dict = field(default_factory=dict)

    def request_variables(self) -> List[str]:
        """Variable codes to request, with margin-of-error twins when asked"""
        codes = list(self.variables)
        if self.include_moe:
            codes += [moe_code(v) for v in self.variables if v.endswith('E')]
        return codes


def moe_code(variable: str) -> str:
    """B01003_001E -> B01003_001M"""
    return variable[:-1] + 'M'


def year_range(start: int, end: int, exclude: Iterable[int] = ()) -> List[int]:
    """Inclusive list of years, skipping any in `exclude`"""
    if end < start:
        raise InvalidParameter('Year range ends before it starts', keys=[start, end])
    excluded = set(exclude)
    return [y for y in range(start, end + 1) if y not in excluded]


def validate_query(query: CensusQuery, year: int):
    """
    Check a query locally before spending a request on it

    Raises:
        InvalidParameter: bad variable code, geography, shape, or year
    """
    if not query.variables:
        raise InvalidParameter('No variable codes requested', keys=[query.dataset])

    bad = [v for v in query.variables if not VARIABLE_PATTERN.match(v)]
    if bad:
        raise InvalidParameter('Malformed Census variable code', keys=bad)

    if query.geography not in GEOGRAPHY_LEVELS:
        raise InvalidParameter(
            f'Unsupported geography level (use one of {sorted(GEOGRAPHY_LEVELS)})',
            keys=[query.geography]
        )
    if query.geography == 'tract' and not query.state:
        raise InvalidParameter('Tract queries need a state filter', keys=[query.geography])
    if query.county and query.geography == 'state':
        raise InvalidParameter('County filter given for a state-level query',
                               keys=[query.county])

    if query.shape not in ('wide', 'long'):
        raise InvalidParameter('Output shape must be wide or long', keys=[query.shape])

    first_year = CENSUS_DATASET_FIRST_YEAR.get(query.dataset)
    if first_year is not None and year < first_year:
        raise InvalidParameter(
            f'{query.dataset} starts in {first_year}', keys=[query.dataset, year]
        )
    if year in CENSUS_DATASET_MISSING_YEARS.get(query.dataset, set()):
        raise InvalidParameter(
            f'{query.dataset} was not released for this year', keys=[query.dataset, year]
        )


def build_params(query: CensusQuery, api_key: str) -> dict:
    """Translate a query into Census API `get` / `for` / `in` parameters"""
    params = {'get': ','.join(['NAME'] + query.request_variables())}

    if query.geography == 'state':
        params['for'] = f'state:{query.state or "*"}'
    elif query.geography == 'county':
        params['for'] = f'county:{query.county or "*"}'
        params['in'] = f'state:{query.state or "*"}'
    else:
        params['for'] = 'tract:*'
        clause = f'state:{query.state}'
        if query.county:
            clause += f' county:{query.county}'
        params['in'] = clause

    params['key'] = api_key
    return params


def _raise_for_api_error(response: requests.Response, query: CensusQuery, year: int):
    """Map Census API error responses to pipeline errors"""
    status = response.status_code
    if status == 200:
        return

    body = response.text or ''
    if status == 400:
        match = UNKNOWN_VARIABLE_PATTERN.search(body)
        if match:
            raise InvalidParameter('Unknown Census variable', keys=[match.group(1), year])
        raise InvalidParameter(f'Census API rejected the query: {body.strip()[:200]}',
                               keys=[query.dataset, year])
    if status == 404:
        raise InvalidParameter('Dataset/year not published by the Census API',
                               keys=[query.dataset, year])
    if status == 204:
        raise SourceUnavailable('Census API returned no rows for this geography',
                                keys=[query.dataset, year, query.state, query.county])
    raise SourceUnavailable(f'Census API returned HTTP {status}',
                            keys=[query.dataset, year] + list(query.variables))


def parse_census_response(payload, query: CensusQuery, year: int) -> pd.DataFrame:
    """
    Convert the API's list-of-lists JSON into a typed wide table

    Columns: GEOID, NAME, <geo columns>, <variables...>, year
    """
    if not isinstance(payload, list) or len(payload) < 1:
        raise SourceUnavailable('Unexpected Census API payload',
                                keys=[query.dataset, year])

    header, rows = payload[0], payload[1:]
    df = pd.DataFrame(rows, columns=header)

    geo_cols, widths = GEOGRAPHY_LEVELS[query.geography]
    missing = [c for c in geo_cols if c not in df.columns]
    if missing:
        raise SourceUnavailable('Census response missing geography columns',
                                keys=missing + [year])

    for col, width in zip(geo_cols, widths):
        df[col] = df[col].astype(str).str.zfill(width)
    df['GEOID'] = df[geo_cols].agg(''.join, axis=1) if len(df) else pd.Series(dtype=str)

    # Make numbers numeric, sentinels become null
    for code in query.request_variables():
        if code in df.columns:
            values = pd.to_numeric(df[code], errors='coerce')
            df[code] = values.where(~values.isin(CENSUS_NULL_SENTINELS), np.nan)

    df['year'] = int(year)

    if query.labels:
        df = df.rename(columns=query.labels)

    ordered = ['GEOID', 'NAME'] + geo_cols
    rest = [c for c in df.columns if c not in ordered]
    return df[ordered + rest].reset_index(drop=True)


def to_long(df: pd.DataFrame, query: CensusQuery) -> pd.DataFrame:
    """
    Long output: one row per (GEOID, year, variable) with estimate [+ moe]
    """
    estimate_cols = [query.labels.get(v, v) for v in query.variables]
    id_cols = [c for c in df.columns
               if c not in estimate_cols and c not in _moe_columns(query)]

    long = df.melt(id_vars=id_cols, value_vars=estimate_cols,
                   var_name='variable', value_name='estimate')

    if query.include_moe:
        moe_cols = _moe_columns(query)
        moe = df.melt(id_vars=['GEOID', 'year'], value_vars=moe_cols,
                      var_name='moe_variable', value_name='moe')
        reverse = {query.labels.get(moe_code(v), moe_code(v)): query.labels.get(v, v)
                   for v in query.variables if v.endswith('E')}
        moe['variable'] = moe['moe_variable'].map(reverse)
        long = long.merge(moe.drop(columns='moe_variable'),
                          on=['GEOID', 'year', 'variable'], how='left')

    return long.sort_values(['GEOID', 'year', 'variable'], kind='mergesort').reset_index(drop=True)


def _moe_columns(query: CensusQuery) -> List[str]:
    if not query.include_moe:
        return []
    return [query.labels.get(moe_code(v), moe_code(v))
            for v in query.variables if v.endswith('E')]


def fetch_census_table(query: CensusQuery, year: int,
                       session: requests.Session = None,
                       api_key: str = None,
                       timeout: float = REQUEST_TIMEOUT,
                       verbose: bool = True) -> pd.DataFrame:
    """
    Fetch one year of a Census API query

    Args:
        query: What to pull
        year: Data year
        session: HTTP session (default: retrying session)
        api_key: Census API key (default: CENSUS_API_KEY environment variable)
        timeout: Per-request timeout in seconds
        verbose: Print progress

    Returns:
        DataFrame tagged with a `year` column, wide or long per `query.shape`

    Raises:
        MissingApiKey: No API key configured
        InvalidParameter: Bad variable/geography/year
        SourceUnavailable: Network or API failure
    """
    validate_query(query, year)

    api_key = api_key or get_census_api_key()
    if not api_key:
        raise MissingApiKey(
            'Missing CENSUS_API_KEY. Set it as an environment variable or in .env',
            keys=[query.dataset, year]
        )

    url = f'{CENSUS_API_BASE}/{year}/{query.dataset}'
    params = build_params(query, api_key)
    keys = [query.dataset, year] + list(query.variables)

    if verbose:
        print(f'   Requesting {query.dataset} {year} ({len(query.variables)} variables)...', end='')

    response = http_get(url, params=params, session=session, timeout=timeout, keys=keys)
    _raise_for_api_error(response, query, year)

    try:
        payload = response.json()
    except ValueError as e:
        raise SourceUnavailable('Census API returned non-JSON body', keys=keys) from e

    df = parse_census_response(payload, query, year)

    if verbose:
        print(f' ✓ {len(df):,} rows')

    if query.shape == 'long':
        return to_long(df, query)
    return df


def fetch_census_years(query: CensusQuery, years: Iterable[int],
                       session: requests.Session = None,
                       api_key: str = None,
                       timeout: float = REQUEST_TIMEOUT,
                       verbose: bool = True) -> pd.DataFrame:
    """
    Fetch a query for several years and stack the results

    Requests are issued sequentially, one per year, in ascending year order.
    Duplicate years in `years` are fetched once. Any failing year aborts the
    whole pull (fail-fast) with the year in the error keys.

    Returns:
        Concatenated DataFrame sorted by year (stable within a year)
    """
    years = sorted(set(int(y) for y in years))
    if not years:
        raise InvalidParameter('No years requested', keys=[query.dataset])

    # Validate every year before the first request goes out
    for year in years:
        validate_query(query, year)

    own_session = session is None
    session = session or get_http_session()

    if verbose:
        print(f'\nFetching {query.dataset} for {len(years)} years '
              f'({years[0]}-{years[-1]})...')

    frames = []
    try:
        for year in years:
            frames.append(fetch_census_table(query, year, session=session, api_key=api_key,
                                             timeout=timeout, verbose=verbose))
    finally:
        if own_session:
            session.close()

    combined = pd.concat(frames, ignore_index=True)
    combined = combined.sort_values('year', kind='mergesort').reset_index(drop=True)

    if verbose:
        print(f'✓ Combined {len(combined):,} rows across {combined["year"].nunique()} years')

    return combined
