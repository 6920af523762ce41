#!/usr/bin/env python3
"""
County Population Post Tables

Builds the tables behind the county population posts from a wide table of
decennial counts (one row per county, one column per census year):

- Peak decade per county, the share of that peak still held in the latest
  census, and the county's Census region/division
- Largest single-decade change per county, flagged when it is an outlier
  against the county's other decades

Input columns: fips, name ("Autauga County, Alabama"), 1920 ... 2020

Usage:
    from blog_etl.datasets.population import build_population_peaks
    result = build_population_peaks(wide_df)
    result.table.head()
"""

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from blog_etl.clean.cleaning import (
    DropNulls, NullReport, RENAMED_COUNTY_FIPS, RenameValues, SplitColumn,
    apply_rules, require_columns
)
from blog_etl.features.derived import (
    add_ratio, flag_outlier_periods, largest_change, period_changes
)
from blog_etl.integrate.join import inner_join
from blog_etl.integrate.lookups import census_regions
from blog_etl.transform.aggregate import aggregate_max
from blog_etl.transform.reshape import wide_to_long
from blog_etl.utils.validation import (
    aggregated_schema, long_table_schema, validate_table
)

ENTITY_KEYS = ['fips', 'county', 'state']


@dataclass
class PostTables:
    """Final table plus the intermediate long table and null reports"""
    table: pd.DataFrame
    long: pd.DataFrame
    reports: List[NullReport] = field(default_factory=list)

    @property
    def excluded_keys(self) -> list:
        return [k for r in self.reports for k in r.keys]


def _period_columns(df: pd.DataFrame) -> List[str]:
    return [c for c in df.columns if str(c).strip().isdigit()]


def county_population_long(wide: pd.DataFrame,
                           id_column: str = 'fips',
                           name_column: str = 'name',
                           max_null_entities: Optional[int] = 5,
                           verbose: bool = True):
    """
    Clean the wide county table and melt it to (county, decade) rows

    Counties with a null in any decade are reported and excluded before
    reshaping, so every remaining county has a complete series.

    Returns:
        (long DataFrame, null reports)
    """
    require_columns(wide, [id_column, name_column], 'county population table')
    periods = _period_columns(wide)

    if verbose:
        print('\n' + '='*60)
        print('CLEANING COUNTY POPULATION TABLE')
        print('='*60)
        print(f'  Counties: {len(wide):,}   Decades: {len(periods)} '
              f'({periods[0] if periods else "-"}-{periods[-1] if periods else "-"})')

    wide = wide.rename(columns={id_column: 'fips'})
    clean, reports = apply_rules(wide, [
        RenameValues('fips', RENAMED_COUNTY_FIPS),
        SplitColumn(name_column, ',', ['county', 'state']),
        DropNulls(periods, key='fips', max_excluded=max_null_entities),
    ], verbose=verbose)

    long = wide_to_long(clean, ENTITY_KEYS, period_columns=periods,
                        period_name='period', value_name='population')
    validate_table(long, long_table_schema(ENTITY_KEYS, 'period', 'population'),
                   'county population (long)', verbose=verbose)

    return long, reports


def build_population_peaks(wide: pd.DataFrame,
                           id_column: str = 'fips',
                           name_column: str = 'name',
                           max_null_entities: Optional[int] = 5,
                           max_unmatched_counties: Optional[int] = None,
                           verbose: bool = True) -> PostTables:
    """
    Peak decade per county, joined to Census regions

    Output columns: fips, county, state, peak_period, peak_population,
    latest_period, latest_population, pct_of_peak, state_abbr, region, division
    """
    long, reports = county_population_long(wide, id_column, name_column,
                                           max_null_entities, verbose)

    if verbose:
        print('\n' + '='*60)
        print('PEAK DECADE PER COUNTY')
        print('='*60)

    peaks = aggregate_max(long, ENTITY_KEYS, value='population', at='period')
    peaks = peaks.rename(columns={'period': 'peak_period', 'population': 'peak_population'})

    latest_period = long['period'].max()
    latest = long.loc[long['period'] == latest_period, ENTITY_KEYS + ['population']]
    latest = latest.rename(columns={'population': 'latest_population'})

    table = peaks.merge(latest, on=ENTITY_KEYS, how='left')
    table['latest_period'] = latest_period
    table = add_ratio(table, 'latest_population', 'peak_population', 'pct_of_peak',
                      scale=100, decimals=1)

    regions = census_regions().drop(columns='state_fips')
    table = inner_join(table, regions, on='state', max_dropped=max_unmatched_counties,
                       verbose=verbose)

    validate_table(table, aggregated_schema(['fips'], 'peak_population', min_value=0),
                   'county population peaks', verbose=verbose)

    if verbose:
        peaked_latest = (table['peak_period'] == latest_period).sum()
        print(f'  Counties at their peak in {latest_period}: {peaked_latest:,} / {len(table):,}')

    columns = ENTITY_KEYS + ['peak_period', 'peak_population', 'latest_period',
                             'latest_population', 'pct_of_peak',
                             'state_abbr', 'region', 'division']
    return PostTables(table=table[columns], long=long, reports=reports)


def build_population_growth(wide: pd.DataFrame,
                            id_column: str = 'fips',
                            name_column: str = 'name',
                            direction: str = 'increase',
                            threshold: float = 3.5,
                            max_null_entities: Optional[int] = 5,
                            verbose: bool = True) -> PostTables:
    """
    Largest single-decade change per county with an outlier flag

    Output columns: fips, county, state, period, change, is_outlier,
    is_outlier_score
    """
    long, reports = county_population_long(wide, id_column, name_column,
                                           max_null_entities, verbose)

    changes = period_changes(long, ENTITY_KEYS, at='period', value='population')
    flagged = flag_outlier_periods(changes, ['fips'], value='change', threshold=threshold)

    largest = largest_change(long, ENTITY_KEYS, at='period', value='population',
                             direction=direction)
    table = largest.merge(
        flagged[['fips', 'period', 'is_outlier', 'is_outlier_score']],
        on=['fips', 'period'], how='left'
    )

    if verbose:
        print(f'  ✓ Largest {direction} computed for {len(table):,} counties; '
              f'{int(table["is_outlier"].sum()):,} are outliers')

    return PostTables(table=table, long=flagged, reports=reports)
