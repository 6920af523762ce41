import pandas as pd
import pytest

from scripts import run_pipeline


@pytest.fixture
def outputs(monkeypatch, tmp_path):
    for name in ('GOLD_POSTS', 'FIGURES', 'INTERACTIVE', 'MAPS', 'BRONZE_CENSUS'):
        directory = tmp_path / name.lower()
        directory.mkdir()
        monkeypatch.setattr(run_pipeline, name, directory)
    monkeypatch.setattr(run_pipeline, 'ensure_directories', lambda: None)
    return tmp_path


def test_league_command(outputs, nba_totals, wnba_totals):
    nba = outputs / 'nba.csv'
    wnba = outputs / 'wnba.csv'
    nba_totals.to_csv(nba, index=False)
    wnba_totals.to_csv(wnba, index=False)

    assert run_pipeline.main(['league', '--nba', str(nba), '--wnba', str(wnba)]) == 0

    tops = pd.read_csv(outputs / 'gold_posts' / 'league_top_scoring_shares.csv')
    assert set(tops['league']) == {'NBA', 'WNBA'}
    assert (outputs / 'figures' / 'league_top_scoring_share.png').exists()
    assert (outputs / 'interactive' / 'league_top_scoring_share.html').exists()


def test_population_command(outputs, county_wide):
    source = outputs / 'county_population.csv'
    county_wide.to_csv(source, index=False)

    assert run_pipeline.main(['population', '--input', str(source)]) == 0

    peaks = pd.read_csv(outputs / 'gold_posts' / 'county_population_peaks.csv',
                        dtype={'fips': str})
    assert len(peaks) == 4
    assert (outputs / 'figures' / 'county_peak_decades.png').exists()


def test_pipeline_errors_exit_nonzero(outputs, monkeypatch):
    monkeypatch.delenv('CENSUS_API_KEY', raising=False)
    code = run_pipeline.main(['census', '--dataset', 'acs/acs1', '--variables', 'B01003_001E',
                              '--state', '13', '--county', '121',
                              '--start', '2010', '--end', '2012'])
    assert code == 1
