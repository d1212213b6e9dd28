"""
Pytest Configuration and Fixtures
==================================
Synthetic placement and coal data, so no test needs the network.
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


def generate_placement_data(n_rows: int, seed: int = 42) -> pd.DataFrame:
    """Synthetic rows in the layout of Placement_Data_Full_Class.csv."""
    rng = np.random.default_rng(seed)

    ssc_p = rng.uniform(40, 90, n_rows).round(2)
    hsc_p = rng.uniform(40, 90, n_rows).round(2)
    degree_p = rng.uniform(50, 90, n_rows).round(2)
    etest_p = rng.uniform(50, 98, n_rows).round(2)
    mba_p = rng.uniform(50, 78, n_rows).round(2)
    workex = rng.choice(['Yes', 'No'], n_rows)

    # placement driven mostly by school marks and work experience
    score = 0.08 * (ssc_p - 65) + 0.05 * (degree_p - 70) + 1.0 * (workex == 'Yes')
    placed = score + rng.normal(0, 0.8, n_rows) > 0
    # keep both classes present whatever the noise does
    placed[0], placed[1] = True, False

    status = np.where(placed, 'Placed', 'Not Placed')
    salary = np.where(placed, rng.integers(200000, 500000, n_rows), np.nan)

    return pd.DataFrame({
        'sl_no': np.arange(1, n_rows + 1),
        'gender': rng.choice(['M', 'F'], n_rows),
        'ssc_p': ssc_p,
        'ssc_b': rng.choice(['Central', 'Others'], n_rows),
        'hsc_p': hsc_p,
        'hsc_b': rng.choice(['Central', 'Others'], n_rows),
        'hsc_s': rng.choice(['Commerce', 'Science', 'Arts'], n_rows),
        'degree_p': degree_p,
        'degree_t': rng.choice(['Comm&Mgmt', 'Sci&Tech', 'Others'], n_rows),
        'workex': workex,
        'etest_p': etest_p,
        'specialisation': rng.choice(['Mkt&HR', 'Mkt&Fin'], n_rows),
        'mba_p': mba_p,
        'status': status,
        'salary': salary,
    })


COAL_CSV = """Coal consumption (Quadrillion Btu)
Source: U.S. Energy Information Administration
,1980,1981,1982,1983
North America,16.4,16.8,16.2,16.9
United States,15.4,15.9,15.3,15.9
Canada,1.0,0.9,0.9,1.0
Antarctica,--,--,--,--
Asia & Oceania,11.2,11.8,12.4,13.1
China,13.1,13.2,14.0,14.9
Japan,2.4,2.5,2.6,2.7
World,71.7,71.6,72.0,73.9
"""


@pytest.fixture
def placement_df():
    return generate_placement_data(200)


@pytest.fixture
def placement_csv(tmp_path, placement_df):
    path = tmp_path / 'placement.csv'
    placement_df.to_csv(path, index=False)
    return path


@pytest.fixture
def coal_csv(tmp_path):
    path = tmp_path / 'coal.csv'
    path.write_text(COAL_CSV)
    return path


@pytest.fixture
def coal_wide():
    """Already typed wide coal table, region first and one float column per year."""
    return pd.DataFrame({
        'region': ['North America', 'United States', 'Antarctica', 'World'],
        '1980': [16.4, 15.4, np.nan, 71.7],
        '1981': [16.8, 15.9, np.nan, 71.6],
        '1982': [16.2, 15.3, np.nan, 72.0],
    })


@pytest.fixture
def binary_xy():
    """Encoded predictors and a 0/1 target with a learnable signal."""
    rng = np.random.default_rng(7)
    n_rows = 150
    X = pd.DataFrame({
        'x1': rng.normal(size=n_rows),
        'x2': rng.normal(size=n_rows),
        'flag': rng.integers(0, 2, n_rows),
    })
    y = pd.Series(((X['x1'] + 0.5 * X['flag'] + rng.normal(0, 0.5, n_rows)) > 0).astype(int), name='status')
    return X, y
