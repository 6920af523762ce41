"""
Lookup tables joined into the post tables

Census regions and divisions per state (plus DC), keyed by name,
postal abbreviation, and FIPS code.
"""

import pandas as pd

# (state, abbr, fips, region, division)
_STATES = [
    ('Connecticut', 'CT', '09', 'Northeast', 'New England'),
    ('Maine', 'ME', '23', 'Northeast', 'New England'),
    ('Massachusetts', 'MA', '25', 'Northeast', 'New England'),
    ('New Hampshire', 'NH', '33', 'Northeast', 'New England'),
    ('Rhode Island', 'RI', '44', 'Northeast', 'New England'),
    ('Vermont', 'VT', '50', 'Northeast', 'New England'),
    ('New Jersey', 'NJ', '34', 'Northeast', 'Middle Atlantic'),
    ('New York', 'NY', '36', 'Northeast', 'Middle Atlantic'),
    ('Pennsylvania', 'PA', '42', 'Northeast', 'Middle Atlantic'),
    ('Illinois', 'IL', '17', 'Midwest', 'East North Central'),
    ('Indiana', 'IN', '18', 'Midwest', 'East North Central'),
    ('Michigan', 'MI', '26', 'Midwest', 'East North Central'),
    ('Ohio', 'OH', '39', 'Midwest', 'East North Central'),
    ('Wisconsin', 'WI', '55', 'Midwest', 'East North Central'),
    ('Iowa', 'IA', '19', 'Midwest', 'West North Central'),
    ('Kansas', 'KS', '20', 'Midwest', 'West North Central'),
    ('Minnesota', 'MN', '27', 'Midwest', 'West North Central'),
    ('Missouri', 'MO', '29', 'Midwest', 'West North Central'),
    ('Nebraska', 'NE', '31', 'Midwest', 'West North Central'),
    ('North Dakota', 'ND', '38', 'Midwest', 'West North Central'),
    ('South Dakota', 'SD', '46', 'Midwest', 'West North Central'),
    ('Delaware', 'DE', '10', 'South', 'South Atlantic'),
    ('District of Columbia', 'DC', '11', 'South', 'South Atlantic'),
    ('Florida', 'FL', '12', 'South', 'South Atlantic'),
    ('Georgia', 'GA', '13', 'South', 'South Atlantic'),
    ('Maryland', 'MD', '24', 'South', 'South Atlantic'),
    ('North Carolina', 'NC', '37', 'South', 'South Atlantic'),
    ('South Carolina', 'SC', '45', 'South', 'South Atlantic'),
    ('Virginia', 'VA', '51', 'South', 'South Atlantic'),
    ('West Virginia', 'WV', '54', 'South', 'South Atlantic'),
    ('Alabama', 'AL', '01', 'South', 'East South Central'),
    ('Kentucky', 'KY', '21', 'South', 'East South Central'),
    ('Mississippi', 'MS', '28', 'South', 'East South Central'),
    ('Tennessee', 'TN', '47', 'South', 'East South Central'),
    ('Arkansas', 'AR', '05', 'South', 'West South Central'),
    ('Louisiana', 'LA', '22', 'South', 'West South Central'),
    ('Oklahoma', 'OK', '40', 'South', 'West South Central'),
    ('Texas', 'TX', '48', 'South', 'West South Central'),
    ('Arizona', 'AZ', '04', 'West', 'Mountain'),
    ('Colorado', 'CO', '08', 'West', 'Mountain'),
    ('Idaho', 'ID', '16', 'West', 'Mountain'),
    ('Montana', 'MT', '30', 'West', 'Mountain'),
    ('Nevada', 'NV', '32', 'West', 'Mountain'),
    ('New Mexico', 'NM', '35', 'West', 'Mountain'),
    ('Utah', 'UT', '49', 'West', 'Mountain'),
    ('Wyoming', 'WY', '56', 'West', 'Mountain'),
    ('Alaska', 'AK', '02', 'West', 'Pacific'),
    ('California', 'CA', '06', 'West', 'Pacific'),
    ('Hawaii', 'HI', '15', 'West', 'Pacific'),
    ('Oregon', 'OR', '41', 'West', 'Pacific'),
    ('Washington', 'WA', '53', 'West', 'Pacific'),
]


def census_regions() -> pd.DataFrame:
    """
    State -> Census region/division lookup

    Columns: state, state_abbr, state_fips, region, division
    """
    df = pd.DataFrame(_STATES, columns=['state', 'state_abbr', 'state_fips',
                                        'region', 'division'])
    return df.astype('string')
