import pytest
import polars as pl
from datetime import date
from wellforge.config.settings import Settings


def write_csv(path, records):
    pl.DataFrame(records).write_csv(path)
    return str(path)


@pytest.fixture
def long_production():
    """The three-fact production example: W1 oil in two months, water in one."""
    return pl.DataFrame({
        "well_id": [1, 1, 1],
        "production_date": [date(2020, 1, 1), date(2020, 2, 1), date(2020, 1, 1)],
        "measurement_type": ["oil", "oil", "water"],
        "volume": [10.0, 5.0, 2.0],
    })


@pytest.fixture
def sample_inputs(tmp_path):
    """
    Three raw input files with un-canonical headers.
    Well 3 has no production and no treatments.
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    write_csv(data_dir / "well_headers.csv", [
        {"Well ID": 1, "Well Name": "Alpha 1", "Operator": "Alpha", "Latitude": 40.00, "Longitude": -104.00, "Spud Date": "2019-01-01"},
        {"Well ID": 2, "Well Name": "Alpha 2", "Operator": "Alpha", "Latitude": 40.00, "Longitude": -104.01, "Spud Date": "2019-01-11"},
        {"Well ID": 3, "Well Name": "Beta 1", "Operator": "Beta", "Latitude": 41.00, "Longitude": -104.00, "Spud Date": "2019-02-01"},
    ])
    write_csv(data_dir / "well_treatments.csv", [
        {"Well ID": 1, "Stage Number": 1, "Treatment Date": "2019-02-01", "Fluid Volume (bbl)": 1000.0, "Proppant Mass (lbs)": 50000.0},
        {"Well ID": 1, "Stage Number": 2, "Treatment Date": "2019-02-01", "Fluid Volume (bbl)": 1500.0, "Proppant Mass (lbs)": 70000.0},
        {"Well ID": 2, "Stage Number": 1, "Treatment Date": "2019-02-15", "Fluid Volume (bbl)": 900.0, "Proppant Mass (lbs)": 40000.0},
    ])
    write_csv(data_dir / "well_production.csv", [
        {"Well ID": 1, "Production Date": "2020-01-01", "Measurement Type": "Oil", "Volume": 10.0},
        {"Well ID": 1, "Production Date": "2020-02-01", "Measurement Type": "Oil", "Volume": 5.0},
        {"Well ID": 1, "Production Date": "2020-01-01", "Measurement Type": "Water", "Volume": 2.0},
        {"Well ID": 1, "Production Date": "2020-01-01", "Measurement Type": "Hours", "Volume": 100.0},
        {"Well ID": 2, "Production Date": "2020-01-01", "Measurement Type": "oil ", "Volume": 7.0},
        {"Well ID": 2, "Production Date": "2020-01-01", "Measurement Type": "Hours", "Volume": 50.0},
    ])
    return data_dir


@pytest.fixture
def pipeline_settings(tmp_path, sample_inputs):
    return Settings(
        data_dir=str(sample_inputs),
        output_path=str(tmp_path / "output" / "well_features.csv"),
        log_dir=str(tmp_path / "logs"),
    )
