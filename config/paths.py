"""
Project Path Configuration

Centralized path definitions for post data and rendered figures
Using Medallion Architecture: Bronze (raw) → Silver (cleaned) → Gold (plot-ready)
"""

from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# ==============================================================================
# MEDALLION ARCHITECTURE (Bronze / Silver / Gold)
# ==============================================================================

DATA_ROOT = PROJECT_ROOT / "data"

# Bronze Layer: Raw, immutable data (as downloaded)
BRONZE = DATA_ROOT / "bronze"
BRONZE_CENSUS = BRONZE / "census"
BRONZE_SPORTS = BRONZE / "sports"
BRONZE_BOUNDARIES = BRONZE / "boundaries"

# Silver Layer: Cleaned, long-form tables
SILVER = DATA_ROOT / "silver"
SILVER_CENSUS = SILVER / "census"
SILVER_SPORTS = SILVER / "sports"

# Gold Layer: Aggregated, joined, one row per plotted unit
GOLD = DATA_ROOT / "gold"
GOLD_POSTS = GOLD / "posts"

# ==============================================================================
# DEFAULT FILES
# ==============================================================================

DEFAULT_COUNTY_POPULATION_FILE = BRONZE_CENSUS / "county_population_1920_2020.csv"
DEFAULT_COUNTY_BOUNDARIES_DIR = BRONZE_BOUNDARIES / "county"
DEFAULT_NBA_STATS_FILE = BRONZE_SPORTS / "nba_player_totals.csv"
DEFAULT_WNBA_STATS_FILE = BRONZE_SPORTS / "wnba_player_totals.csv"

# ==============================================================================
# OUTPUTS
# ==============================================================================

OUTPUTS_ROOT = PROJECT_ROOT / "outputs"
FIGURES = OUTPUTS_ROOT / "figures"
MAPS = OUTPUTS_ROOT / "maps"
INTERACTIVE = OUTPUTS_ROOT / "interactive"

# ==============================================================================
# DIRECTORY INITIALIZATION
# ==============================================================================

def ensure_directories():
    """Create all necessary directories if they don't exist"""

    bronze_dirs = [BRONZE, BRONZE_CENSUS, BRONZE_SPORTS, BRONZE_BOUNDARIES,
                   DEFAULT_COUNTY_BOUNDARIES_DIR]
    silver_dirs = [SILVER, SILVER_CENSUS, SILVER_SPORTS]
    gold_dirs = [GOLD, GOLD_POSTS]
    output_dirs = [OUTPUTS_ROOT, FIGURES, MAPS, INTERACTIVE]

    for directory in bronze_dirs + silver_dirs + gold_dirs + output_dirs:
        directory.mkdir(parents=True, exist_ok=True)


# ==============================================================================
# ARCHITECTURE DOCUMENTATION
# ==============================================================================

ARCHITECTURE_DOCS = """
MEDALLION DATA ARCHITECTURE
===========================

Bronze Layer (data/bronze/):
  - Raw tables as downloaded (Census API pulls, league stat exports)
  - Boundary files, one per vintage year
  - Never modified after download

Silver Layer (data/silver/):
  - Cleaned, long-form (entity, period, value) tables
  - Null reports already reviewed

Gold Layer (data/gold/):
  - Aggregated + joined tables, one row per plotted unit
  - Example: posts/county_population_peaks.csv
"""

def print_architecture():
    """Print architecture documentation"""
    print(ARCHITECTURE_DOCS)
