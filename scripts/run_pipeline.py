#!/usr/bin/env python3
"""
Post Pipeline Orchestration Script

Builds the tables and figures behind the analysis posts:
1. census     - pull a Census API query for a range of years
2. population - county population peaks / largest decade change
3. league     - scoring share of the top player per team-season

Usage:
    # Multi-year ACS pull for one county (needs CENSUS_API_KEY)
    python scripts/run_pipeline.py census --dataset acs/acs1 --variables B01003_001E \\
        --geography county --state 13 --county 121 --start 2010 --end 2022 --exclude 2020

    # County population post
    python scripts/run_pipeline.py population --input data/bronze/census/county_population_1920_2020.csv

    # Both league posts through the same pipeline
    python scripts/run_pipeline.py league --nba data/bronze/sports/nba_player_totals.csv \\
        --wnba data/bronze/sports/wnba_player_totals.csv
"""

import sys
import argparse
from pathlib import Path
from datetime import datetime

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.append(str(PROJECT_ROOT))

from config.paths import (
    DEFAULT_COUNTY_BOUNDARIES_DIR, DEFAULT_COUNTY_POPULATION_FILE,
    DEFAULT_NBA_STATS_FILE, DEFAULT_WNBA_STATS_FILE, BRONZE_CENSUS,
    FIGURES, GOLD_POSTS, INTERACTIVE, MAPS, ensure_directories
)
from blog_etl.datasets.leagues import run_all_leagues
from blog_etl.datasets.population import build_population_growth, build_population_peaks
from blog_etl.datasets.render import finalize_for_render
from blog_etl.download.census_api import CensusQuery, fetch_census_years, year_range
from blog_etl.errors import PipelineError
from blog_etl.load.tables import load_boundaries, load_table
from blog_etl.transform.aggregate import aggregate_max, aggregate_sum
from blog_figures import (
    create_choropleth_map, create_interactive_chart, create_ranked_bar_chart,
    merge_boundaries,
    plot_faceted_chart, plot_line_chart, plot_static_choropleth,
    save_figure, save_html, save_map
)


def print_header(text):
    """Print a formatted header"""
    print('\n' + '=' * 80)
    print(text.center(80))
    print('=' * 80 + '\n')


def run_census(args):
    """Multi-year Census API pull saved to the bronze layer"""
    print_header('CENSUS API PULL')

    query = CensusQuery(
        dataset=args.dataset,
        variables=args.variables.split(','),
        geography=args.geography,
        state=args.state,
        county=args.county,
        include_moe=args.moe,
        shape=args.shape,
    )
    years = year_range(args.start, args.end, exclude=args.exclude or [])
    df = fetch_census_years(query, years)

    output = Path(args.output) if args.output else (
        BRONZE_CENSUS / f'{args.dataset.replace("/", "_")}_{args.start}_{args.end}.csv'
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    print(f'\n✓ Saved {len(df):,} rows to {output}')


def run_population(args):
    """County population peaks + largest-change tables and figures"""
    print_header('COUNTY POPULATION POST')

    wide = load_table(args.input, id_columns=['fips'])

    peaks = build_population_peaks(wide, max_null_entities=args.max_null)
    peaks.table.to_csv(GOLD_POSTS / 'county_population_peaks.csv', index=False)

    growth = build_population_growth(wide, max_null_entities=args.max_null,
                                     direction=args.direction)
    growth.table.to_csv(GOLD_POSTS / 'county_population_largest_change.csv', index=False)

    # Counties by peak decade, one line per region
    counted = peaks.table.assign(counties=1)
    by_decade = aggregate_sum(counted, ['region', 'peak_period'], values='counties')
    render = finalize_for_render(by_decade, x='peak_period', y='counties', color='region',
                                 tooltip=['region', 'peak_period', 'counties'])
    save_figure(plot_line_chart(render, title='Counties by Decade of Peak Population',
                                x_label='Peak decade', y_label='Counties'),
                FIGURES / 'county_peak_decades.png')
    save_html(create_interactive_chart(render, title='Counties by Decade of Peak Population',
                                       x_title='Peak decade', y_title='Counties'),
              INTERACTIVE / 'county_peak_decades.html')

    # Same counts faceted by Census division
    by_division = aggregate_sum(counted, ['region', 'division', 'peak_period'],
                                values='counties')
    render_div = finalize_for_render(by_division, x='peak_period', y='counties',
                                     color='region', facet='division')
    save_figure(plot_faceted_chart(render_div, title='Peak Decade by Census Division',
                                   x_label='Peak decade', y_label='Counties'),
                FIGURES / 'county_peak_decades_by_division.png')

    # Largest single-decade change, top counties
    labelled = growth.table.assign(label=growth.table['county'] + ', ' + growth.table['state'])
    render_growth = finalize_for_render(
        labelled, x='label', y='change', key='fips',
        tooltip=['county', 'state', 'period', 'change', 'is_outlier'],
        tooltip_labels={'period': 'Decade ending'}
    )
    save_html(create_ranked_bar_chart(render_growth, top_n=15,
                                      title=f'Largest Single-Decade Population {args.direction.title()}',
                                      x_title='Change in residents'),
              INTERACTIVE / 'county_largest_change.html')

    if args.boundaries:
        year = int(peaks.table['latest_period'].max())
        boundaries = load_boundaries(args.boundaries, year)
        render_map = finalize_for_render(
            peaks.table, x='fips', y='pct_of_peak', key='fips',
            tooltip=['county', 'state', 'peak_period', 'pct_of_peak'],
            tooltip_labels={'pct_of_peak': '% of peak'}
        ).rename(columns={'y': 'fill'})
        geo = merge_boundaries(boundaries, render_map, key='fips')
        save_map(create_choropleth_map(geo, key='fips', legend_name=f'% of peak population in {year}'),
                 MAPS / 'county_pct_of_peak.html')
        save_figure(plot_static_choropleth(geo, title=f'Share of Peak Population Held in {year}',
                                           legend_label='% of peak'),
                    MAPS / 'county_pct_of_peak.png')

    print(f'\n✓ Excluded entities: {peaks.excluded_keys or "none"}')


def run_league(args):
    """Scoring-share tables for each league given"""
    print_header('LEAGUE SCORING SHARE POST')

    sources = {}
    if args.nba:
        sources['nba'] = args.nba
    if args.wnba:
        sources['wnba'] = args.wnba
    if not sources:
        sources = {'nba': DEFAULT_NBA_STATS_FILE, 'wnba': DEFAULT_WNBA_STATS_FILE}

    tops = run_all_leagues({k: str(v) for k, v in sources.items()})
    tops.to_csv(GOLD_POSTS / 'league_top_scoring_shares.csv', index=False)

    # Highest single-player share per league-season
    best = aggregate_max(tops, ['league', 'season'], value='share', at='player')
    best = best.merge(tops[['league', 'season', 'player', 'team', 'share']],
                      on=['league', 'season', 'player', 'share'], how='left')
    best = best.drop_duplicates(subset=['league', 'season'])

    render = finalize_for_render(best, x='season', y='share', color='league', facet='league',
                                 tooltip=['player', 'team', 'season', 'share'],
                                 tooltip_labels={'share': 'Share of team points (%)'})
    save_figure(plot_faceted_chart(render, title='Top Scorer Share of Team Points',
                                   x_label='Season', y_label='% of team points', col_wrap=2),
                FIGURES / 'league_top_scoring_share.png')
    save_html(create_interactive_chart(render, title='Top Scorer Share of Team Points',
                                       x_title='Season', y_title='% of team points'),
              INTERACTIVE / 'league_top_scoring_share.html')


def main(argv=None):
    """Main pipeline orchestration"""
    parser = argparse.ArgumentParser(
        description='Build the tables and figures behind the analysis posts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    sub = parser.add_subparsers(dest='command', required=True)

    census = sub.add_parser('census', help='Pull a Census API query for a year range')
    census.add_argument('--dataset', default='acs/acs5', help='e.g. acs/acs5, acs/acs1, dec/pl')
    census.add_argument('--variables', required=True, help='Comma-separated variable codes')
    census.add_argument('--geography', default='county', choices=['state', 'county', 'tract'])
    census.add_argument('--state', help='State FIPS filter (e.g. 13)')
    census.add_argument('--county', help='County FIPS filter (e.g. 121)')
    census.add_argument('--start', type=int, required=True)
    census.add_argument('--end', type=int, required=True)
    census.add_argument('--exclude', type=int, nargs='*', help='Years to skip (e.g. 2020)')
    census.add_argument('--moe', action='store_true', help='Also pull margins of error')
    census.add_argument('--shape', default='wide', choices=['wide', 'long'])
    census.add_argument('--output', help='Output CSV path')
    census.set_defaults(func=run_census)

    population = sub.add_parser('population', help='County population post')
    population.add_argument('--input', default=str(DEFAULT_COUNTY_POPULATION_FILE))
    population.add_argument('--max-null', type=int, default=5,
                            help='Most counties with missing decades to exclude')
    population.add_argument('--direction', default='increase',
                            choices=['increase', 'decrease', 'absolute'])
    population.add_argument('--boundaries', nargs='?', const=str(DEFAULT_COUNTY_BOUNDARIES_DIR),
                            help='Boundary directory (one file per vintage) to render maps')
    population.set_defaults(func=run_population)

    league = sub.add_parser('league', help='League scoring share post')
    league.add_argument('--nba', help='NBA player totals (path or URL)')
    league.add_argument('--wnba', help='WNBA player totals (path or URL)')
    league.set_defaults(func=run_league)

    args = parser.parse_args(argv)

    print_header('ANALYSIS POSTS - DATA PIPELINE')
    print(f'Started: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}')
    ensure_directories()
    start_time = datetime.now()

    try:
        args.func(args)
    except PipelineError as e:
        print(f'\n✗ {type(e).__name__}: {e}')
        return 1

    print(f'\n✓ Finished in {datetime.now() - start_time}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
