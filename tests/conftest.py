"""
Pytest configuration and shared fixtures
"""

import matplotlib
matplotlib.use("Agg")

import sys
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def close_figures():
    """Close any figures a test leaves open."""
    yield
    plt.close('all')


@pytest.fixture
def scenario_df():
    """Five version records: three majors, three minors."""
    return pd.DataFrame({
        'major': [1, 1, 2, 2, 3],
        'minor': [0, 2, 0, 5, 0]
    })


@pytest.fixture
def version_df():
    """Sixty sorted version records, enough for 10-fold CV after an 80/20 split."""
    rows = [(major, minor) for major in range(6) for minor in range(10)]
    return pd.DataFrame(rows, columns=['major', 'minor'])


@pytest.fixture
def raw_csv(tmp_path):
    """Raw CSV with a header, two incomplete rows and a fractional value."""
    path = tmp_path / "major_minor_versions.csv"
    path.write_text(
        "major,minor\n"
        "1,0\n"
        "1,\n"
        "2,0\n"
        ",5\n"
        "2.7,3\n"
        "3,0\n"
    )
    return path
