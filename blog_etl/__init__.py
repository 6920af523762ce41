"""
Analysis Pipeline for the Census and Sports Posts

This module contains the data engineering code organized by pipeline stage:
1. download/ - Remote data acquisition (Census API, HTTP session)
2. load/ - Reading delimited tables and boundary files
3. clean/ - Column-level cleaning rules and null reports
4. transform/ - Wide/long reshaping and aggregation
5. integrate/ - Joins with lookup tables
6. features/ - Derived metrics and change detection
7. datasets/ - Full post pipelines and the render contract

Usage:
    from blog_etl.transform import wide_to_long, aggregate_max
    from blog_etl.integrate import inner_join, census_regions
"""

__version__ = "1.0.0"
