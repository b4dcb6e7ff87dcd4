from __future__ import annotations

import pytest

from econdash.data import Dataset, clear_dataset_cache


SAMPLE_CSV = """Country,Year,GDP,Inflation Rate,Population
A,2000,100,2.0,10
B,2000,300,4.0,20
A,2001,150,3.0,11
B,2001,,5.0,21
C,2001,50,,5
"""


@pytest.fixture
def sample_rows():
    return [
        {"Country": "A", "Year": 2000, "GDP": 100},
        {"Country": "B", "Year": 2000, "GDP": 300},
        {"Country": "A", "Year": 2001, "GDP": 150},
    ]


@pytest.fixture
def sample_dataset(sample_rows):
    return Dataset.from_records(sample_rows, ["Country", "Year", "GDP"])


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "indicators.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _fresh_dataset_cache():
    clear_dataset_cache()
    yield
    clear_dataset_cache()
