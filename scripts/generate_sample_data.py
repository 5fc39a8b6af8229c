import polars as pl
import random
from pathlib import Path
from datetime import date, timedelta
from typing import List, Dict, Any


data_dir = Path(__file__).parent.parent / "data"

N_WELLS = 60
N_MONTHS = 24
MEASUREMENTS = ["Oil", "Gas", "Water", "Hours"]
OPERATORS = ["Alpha Energy", "Basin Resources", "Cedar Oil"]
FORMATIONS = ["Niobrara", "Codell", "J Sand"]


def generate_headers(n_wells: int) -> List[Dict[str, Any]]:
    """Well headers clustered around three pads."""
    pads = [(40.45, -104.70), (40.20, -104.45), (40.05, -104.90)]
    records = []
    for well_id in range(1, n_wells + 1):
        pad_lat, pad_lon = pads[well_id % len(pads)]
        records.append({
            "Well ID": 5000 + well_id,
            "Well Name": f"Well_{well_id:03d}",
            "Operator": OPERATORS[well_id % len(OPERATORS)],
            "Formation": FORMATIONS[(well_id // 3) % len(FORMATIONS)],
            "Latitude": round(pad_lat + random.uniform(-0.05, 0.05), 6),
            "Longitude": round(pad_lon + random.uniform(-0.05, 0.05), 6),
            "Spud Date": (date(2015, 1, 1) + timedelta(days=random.randint(0, 900))).isoformat(),
            "Total Depth (ft)": round(random.uniform(7000, 12000), 1),
        })
    return records


def generate_treatments(headers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    records = []
    for header in headers:
        spud = date.fromisoformat(header["Spud Date"])
        for stage in range(1, random.randint(10, 40) + 1):
            records.append({
                "Well ID": header["Well ID"],
                "Stage Number": stage,
                "Treatment Date": (spud + timedelta(days=30 + stage // 5)).isoformat(),
                "Fluid Volume (bbl)": round(random.uniform(2000, 9000), 1),
                "Proppant Mass (lbs)": round(random.uniform(150000, 450000), 0),
            })
    return records


def generate_production(headers: List[Dict[str, Any]], n_months: int) -> List[Dict[str, Any]]:
    """Long production rows with a hyperbolic-ish decline and occasional gaps."""
    records = []
    for header in headers:
        initial_oil = random.uniform(3000, 15000)
        for month in range(n_months):
            period = date(2018 + month // 12, month % 12 + 1, 1)
            decline = 1.0 / (1.0 + 0.15 * month)
            volumes = {
                "Oil": initial_oil * decline,
                "Gas": initial_oil * decline * random.uniform(2.5, 4.0),
                "Water": initial_oil * random.uniform(0.2, 0.8),
                "Hours": random.uniform(550, 744),
            }
            for measurement in MEASUREMENTS:
                # Roughly 3% of facts are never reported
                if random.random() < 0.03:
                    continue
                records.append({
                    "Well ID": header["Well ID"],
                    "Production Date": period.isoformat(),
                    "Measurement Type": measurement,
                    "Volume": round(volumes[measurement], 2),
                })
    return records


def main():
    random.seed(42)
    data_dir.mkdir(parents=True, exist_ok=True)

    headers = generate_headers(N_WELLS)
    outputs = {
        "well_headers.csv": headers,
        "well_treatments.csv": generate_treatments(headers),
        "well_production.csv": generate_production(headers, N_MONTHS),
    }
    for file_name, records in outputs.items():
        df = pl.DataFrame(records)
        df.write_csv(data_dir / file_name)
        print(f"Saved {len(df):,} records to {data_dir / file_name}")

if __name__ == "__main__":
    main()
