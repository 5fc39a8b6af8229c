import pytest
import polars as pl
from datetime import date
from hypothesis import given, settings as hypothesis_settings, strategies as st
from wellforge.core.aggregation import aggregate_by_key, left_join_unique, numeric_columns
from wellforge.core.reshape import long_to_wide
from wellforge.domain.exceptions import NonUniqueJoinKeyError, SchemaMismatchError

INDEX = ["well_id", "production_date"]


def test_aggregate_example(long_production):
    wide = long_to_wide(long_production, index=INDEX)
    totals = aggregate_by_key(wide, key="well_id", prefix="cum_")
    assert totals.columns == ["well_id", "cum_oil", "cum_water"]
    # The missing February water counts as 0
    assert totals.rows() == [(1, 15.0, 2.0)]


def test_all_missing_group_sums_to_zero():
    df = pl.DataFrame({"well_id": [1, 1, 2], "gas": [None, None, 3.0]})
    totals = aggregate_by_key(df)
    assert totals.rows() == [(1, 0.0), (2, 3.0)]


def test_aggregate_one_row_per_present_group():
    df = pl.DataFrame({"well_id": [3, 1, 3, 3], "oil": [1.0, 2.0, 3.0, 4.0]})
    totals = aggregate_by_key(df)
    assert totals.get_column("well_id").to_list() == [1, 3]
    assert totals.get_column("cum_oil").to_list() == [2.0, 8.0]


def test_aggregate_skips_non_numeric_columns():
    df = pl.DataFrame({
        "well_id": [1, 1],
        "production_date": [date(2020, 1, 1), date(2020, 2, 1)],
        "status": ["on", "off"],
        "oil": [1, 2],
    })
    assert aggregate_by_key(df).columns == ["well_id", "cum_oil"]
    assert numeric_columns(df) == ["well_id", "oil"]


def test_aggregate_explicit_columns_and_count():
    df = pl.DataFrame({
        "well_id": [1, 1, 2],
        "stage_number": [1, 2, 1],
        "fluid": [10.0, 20.0, 5.0],
    })
    totals = aggregate_by_key(df, prefix="total_", columns=["fluid"], count_column="stages")
    assert totals.rows() == [(1, 30.0, 2), (2, 5.0, 1)]
    with pytest.raises(SchemaMismatchError):
        aggregate_by_key(df, columns=["proppant"])
    with pytest.raises(SchemaMismatchError):
        aggregate_by_key(df.with_columns(pl.col("fluid").cast(pl.Utf8)), columns=["fluid"])
    with pytest.raises(SchemaMismatchError):
        aggregate_by_key(df, key="api")


def test_left_join_preserves_every_attribute_row():
    headers = pl.DataFrame({"well_id": [1, 2, 3], "operator": ["a", "b", "c"]})
    totals = pl.DataFrame({"well_id": [3, 1, 9], "cum_oil": [30.0, 10.0, 90.0]})
    joined = left_join_unique(headers, totals)
    assert joined.rows() == [(1, "a", 10.0), (2, "b", None), (3, "c", 30.0)]


def test_left_join_rejects_non_unique_key():
    headers = pl.DataFrame({"well_id": [1, 2]})
    totals = pl.DataFrame({"well_id": [1, 1], "cum_oil": [1.0, 2.0]})
    with pytest.raises(NonUniqueJoinKeyError):
        left_join_unique(headers, totals)


def test_left_join_schema_errors():
    headers = pl.DataFrame({"well_id": [1], "cum_oil": [0.0]})
    with pytest.raises(SchemaMismatchError):
        left_join_unique(headers, pl.DataFrame({"api": [1]}))
    with pytest.raises(SchemaMismatchError):
        left_join_unique(headers, pl.DataFrame({"well_id": [1], "cum_oil": [1.0]}))


def test_left_join_aligns_key_types():
    headers = pl.DataFrame({"well_id": [1, 2]}, schema={"well_id": pl.Int64})
    totals = pl.DataFrame({"well_id": [2], "cum_oil": [5.0]}, schema={"well_id": pl.Int32, "cum_oil": pl.Float64})
    assert left_join_unique(headers, totals).get_column("cum_oil").to_list() == [None, 5.0]


def test_left_join_rejects_incompatible_key_types():
    headers = pl.DataFrame({"well_id": [1, 2]}, schema={"well_id": pl.Int64})
    totals = pl.DataFrame({"well_id": ["a"], "cum_oil": [5.0]})
    with pytest.raises(SchemaMismatchError):
        left_join_unique(headers, totals)


long_facts = st.dictionaries(
    keys=st.tuples(
        st.integers(min_value=1, max_value=6),
        st.integers(min_value=1, max_value=12),
        st.sampled_from(["oil", "gas", "water"]),
    ),
    values=st.integers(min_value=0, max_value=100_000),
    min_size=1,
    max_size=60,
)


@hypothesis_settings(max_examples=50, deadline=None)
@given(long_facts, st.lists(st.integers(min_value=1, max_value=9), min_size=1, max_size=9, unique=True))
def test_aggregate_totals_and_join_safety(fact_map, header_ids):
    long = pl.DataFrame(
        {
            "well_id": [well for well, _, _ in fact_map],
            "production_date": [date(2021, month, 1) for _, month, _ in fact_map],
            "measurement_type": [kind for _, _, kind in fact_map],
            "volume": [float(v) for v in fact_map.values()],
        }
    )
    totals = aggregate_by_key(long_to_wide(long, index=INDEX))

    for row in totals.iter_rows(named=True):
        for kind in long.get_column("measurement_type").unique().to_list():
            expected = long.filter(
                (pl.col("well_id") == row["well_id"]) & (pl.col("measurement_type") == kind)
            ).get_column("volume").sum()
            assert row[f"cum_{kind}"] == pytest.approx(expected)

    headers = pl.DataFrame({"well_id": header_ids})
    assert left_join_unique(headers, totals).height == headers.height
