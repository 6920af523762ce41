#!/usr/bin/env python3
"""
League Scoring Share Post Tables

One pipeline for every league: player season totals → team totals →
each player's share of the team total → the top share per team-season.
The NBA and WNBA posts run the same function with different configs.

Usage:
    from blog_etl.datasets.leagues import NBA, WNBA, run_league_pipeline

    nba = run_league_pipeline(NBA, 'data/bronze/sports/nba_player_totals.csv')
    wnba = run_league_pipeline(WNBA, 'data/bronze/sports/wnba_player_totals.csv')
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import pandas as pd

from blog_etl.clean.cleaning import (
    DropNulls, DropValues, RestrictColumns, RestrictRange, apply_rules
)
from blog_etl.datasets.population import PostTables
from blog_etl.errors import InvalidParameter
from blog_etl.features.derived import add_ratio
from blog_etl.integrate.join import inner_join
from blog_etl.load.tables import load_table
from blog_etl.transform.aggregate import aggregate_max, aggregate_sum
from blog_etl.utils.validation import aggregated_schema, validate_table


@dataclass(frozen=True)
class LeagueConfig:
    """Column names and quirks of one league's player-totals export"""
    name: str
    season_col: str = 'Season'
    player_col: str = 'Player'
    team_col: str = 'Team'
    value_col: str = 'PTS'
    # Rows summarising a traded player's season across teams
    multi_team_codes: tuple = ('TOT',)
    max_null_players: Optional[int] = 10
    # (first, last) season kept; None keeps every season
    seasons: Optional[tuple] = None


NBA = LeagueConfig(
    name='NBA',
    team_col='Tm',
    multi_team_codes=('TOT', '2TM', '3TM', '4TM', '5TM'),
)

WNBA = LeagueConfig(
    name='WNBA',
    team_col='Team',
    multi_team_codes=('TOT',),
)

LEAGUES = {'nba': NBA, 'wnba': WNBA}


@dataclass
class LeagueTables(PostTables):
    """Top share per team-season, plus every player's share"""
    shares: pd.DataFrame = field(default_factory=pd.DataFrame)


def player_shares(players: pd.DataFrame, config: LeagueConfig,
                  verbose: bool = True) -> pd.DataFrame:
    """
    Each player's share (%) of their team's season total

    Adds `team_total` and `share` columns; row count is unchanged.
    """
    season, team, value = config.season_col, config.team_col, config.value_col

    totals = aggregate_sum(players, [season, team], values=value)
    totals = totals.rename(columns={value: 'team_total'})

    # Totals come from the same rows, so no player row may be lost
    shares = inner_join(players, totals, on=[season, team],
                        expected_rows=len(players), verbose=verbose)
    return add_ratio(shares, value, 'team_total', 'share', scale=100, decimals=2)


def run_league_pipeline(config: LeagueConfig,
                        source: Union[str, pd.DataFrame],
                        session=None,
                        verbose: bool = True) -> LeagueTables:
    """
    Build the scoring-share tables for one league

    Args:
        config: League column layout
        source: Path/URL of the player totals table, or an already loaded frame
        session: HTTP session for URL sources
        verbose: Print progress

    Returns:
        LeagueTables with `table` = top scorer share per (season, team)
    """
    season, player, team, value = (config.season_col, config.player_col,
                                   config.team_col, config.value_col)

    if verbose:
        print('\n' + '='*60)
        print(f'{config.name} SCORING SHARES')
        print('='*60)

    if isinstance(source, pd.DataFrame):
        raw = source
    else:
        raw = load_table(source, id_columns=[player, team],
                         numeric_columns=[season, value], session=session,
                         verbose=verbose)

    rules = [
        RestrictColumns([season, player, team, value]),
        DropValues(team, list(config.multi_team_codes)),
        DropNulls([season, team, value], key=player, max_excluded=config.max_null_players),
    ]
    if config.seasons:
        rules.append(RestrictRange(season, *config.seasons))

    players, reports = apply_rules(raw, rules, verbose=verbose)

    shares = player_shares(players, config, verbose=verbose)

    top = aggregate_max(shares, [season, team], value='share', at=player)
    top = top.merge(shares[[season, team, player, value, 'team_total']],
                    on=[season, team, player], how='left')
    top = top.drop_duplicates(subset=[season, team]).reset_index(drop=True)
    top.insert(0, 'league', config.name)

    validate_table(top, aggregated_schema([season, team], 'share', min_value=0),
                   f'{config.name} top shares', verbose=verbose)

    if verbose:
        print(f'  ✓ {len(top):,} team-seasons across {top[season].nunique()} seasons')

    return LeagueTables(table=top, long=players, reports=reports, shares=shares)


def run_all_leagues(sources: Dict[str, Union[str, pd.DataFrame]],
                    session=None, verbose: bool = True) -> pd.DataFrame:
    """
    Run the league pipeline once per configured league and stack the tops

    Args:
        sources: league key ('nba', 'wnba') -> source

    Returns:
        Combined top-share table with a common column layout
    """
    frames: List[pd.DataFrame] = []
    for key, source in sources.items():
        if key.lower() not in LEAGUES:
            raise InvalidParameter(f'Unknown league (use one of {sorted(LEAGUES)})', keys=[key])
        config = LEAGUES[key.lower()]
        result = run_league_pipeline(config, source, session=session, verbose=verbose)
        frames.append(result.table.rename(columns={
            config.season_col: 'season', config.player_col: 'player',
            config.team_col: 'team', config.value_col: 'points',
        }))
    return pd.concat(frames, ignore_index=True)
