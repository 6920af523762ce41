from dataclasses import replace

import pandas as pd
import pytest

from blog_etl.datasets.leagues import (
    NBA,
    WNBA,
    LeagueConfig,
    run_all_leagues,
    run_league_pipeline,
)
from blog_etl.errors import InvalidParameter, NullToleranceExceeded


def test_nba_top_shares(nba_totals):
    result = run_league_pipeline(NBA, nba_totals, verbose=False)
    top = result.table.set_index('Tm')

    assert list(result.table.columns[:3]) == ['league', 'Season', 'Tm']
    assert len(top) == 2

    assert top.loc['BOS', 'Player'] == 'A'
    assert top.loc['BOS', 'share'] == 50.0
    assert top.loc['BOS', 'team_total'] == 4000.0
    # D and E tie at 50%: the first player by name is kept
    assert top.loc['LAL', 'Player'] == 'D'
    assert (result.table['league'] == 'NBA').all()


def test_nba_cleaning(nba_totals):
    result = run_league_pipeline(NBA, nba_totals, verbose=False)

    assert 'TOT' not in set(result.long['Tm'])
    assert 'Age' not in result.long.columns
    assert result.excluded_keys == ['G']
    assert len(result.shares) == len(result.long) == 5


def test_wnba_uses_same_pipeline(wnba_totals):
    result = run_league_pipeline(WNBA, wnba_totals, verbose=False)
    top = result.table.set_index('Team')

    assert top.loc['LVA', 'Player'] == 'Wilson'
    assert top.loc['IND', 'Player'] == 'Clark'
    assert top.loc['IND', 'share'] == pytest.approx(52.35)
    assert (result.table['league'] == 'WNBA').all()


def test_player_null_tolerance(nba_totals):
    strict = LeagueConfig(name='NBA', team_col='Tm', multi_team_codes=('TOT',),
                          max_null_players=0)
    with pytest.raises(NullToleranceExceeded) as exc:
        run_league_pipeline(strict, nba_totals, verbose=False)
    assert exc.value.keys == ['G']


def test_run_all_leagues(nba_totals, wnba_totals):
    combined = run_all_leagues({'nba': nba_totals, 'WNBA': wnba_totals}, verbose=False)

    assert {'league', 'season', 'team', 'player', 'points', 'share'} <= set(combined.columns)
    assert combined.groupby('league').size().to_dict() == {'NBA': 2, 'WNBA': 2}

    with pytest.raises(InvalidParameter):
        run_all_leagues({'nhl': nba_totals}, verbose=False)


def test_season_subset(nba_totals):
    later = nba_totals.assign(Season=2024)
    both = pd.concat([nba_totals, later], ignore_index=True)
    config = replace(NBA, seasons=(2024, 2024))

    result = run_league_pipeline(config, both, verbose=False)
    assert set(result.table['Season']) == {2024}
    assert len(result.table) == 2
