"""
Post pipelines

Each post's tables are built by one function threading frames through
the load → clean → reshape → aggregate → join stages.
"""

from .population import (
    PostTables,
    build_population_peaks,
    build_population_growth,
    county_population_long
)
from .leagues import (
    LeagueConfig,
    NBA,
    WNBA,
    run_league_pipeline,
    run_all_leagues
)
from .render import finalize_for_render, build_tooltip

__all__ = [
    'PostTables',
    'build_population_peaks',
    'build_population_growth',
    'county_population_long',
    'LeagueConfig',
    'NBA',
    'WNBA',
    'run_league_pipeline',
    'run_all_leagues',
    'finalize_for_render',
    'build_tooltip'
]
