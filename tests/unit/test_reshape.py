import pytest
import polars as pl
from datetime import date
from hypothesis import given, settings as hypothesis_settings, HealthCheck, strategies as st
from wellforge.core.reshape import reshape, long_to_wide, wide_to_long, ReshapeDirection
from wellforge.domain.exceptions import DuplicateKeyError, SchemaMismatchError, ParseError, InvalidDataException

INDEX = ["well_id", "production_date"]


def test_long_to_wide_example(long_production):
    wide = long_to_wide(long_production, index=INDEX)
    assert wide.columns == ["well_id", "production_date", "oil", "water"]
    assert wide.rows() == [
        (1, date(2020, 1, 1), 10.0, 2.0),
        (1, date(2020, 2, 1), 5.0, None),
    ]


def test_long_to_wide_default_index_is_every_other_column(long_production):
    wide = reshape(long_production, ReshapeDirection.LONG_TO_WIDE, "measurement_type", "volume")
    assert wide.columns[:2] == INDEX


def test_long_to_wide_rejects_duplicate_facts(long_production):
    duplicated = pl.concat([
        long_production,
        pl.DataFrame({
            "well_id": [1], "production_date": [date(2020, 1, 1)],
            "measurement_type": ["oil"], "volume": [99.0],
        }),
    ])
    with pytest.raises(DuplicateKeyError):
        long_to_wide(duplicated, index=INDEX)


def test_long_to_wide_missing_columns(long_production):
    with pytest.raises(SchemaMismatchError):
        long_to_wide(long_production, key="kind", index=INDEX)
    with pytest.raises(SchemaMismatchError):
        long_to_wide(long_production, index=["well_id", "month"])


def test_long_to_wide_null_key(long_production):
    broken = long_production.with_columns(
        pl.when(pl.col("volume") == 5.0).then(None).otherwise(pl.col("measurement_type")).alias("measurement_type")
    )
    with pytest.raises(ParseError):
        long_to_wide(broken, index=INDEX)


def test_long_to_wide_key_value_colliding_with_index(long_production):
    clashing = long_production.with_columns(pl.lit("well_id").alias("measurement_type")).head(1)
    with pytest.raises(SchemaMismatchError):
        long_to_wide(clashing, index=INDEX)


def test_long_to_wide_rejects_non_text_keys(long_production):
    coded = long_production.with_columns(
        pl.when(pl.col("measurement_type") == "oil").then(10).otherwise(20).alias("measurement_type")
    )
    with pytest.raises(SchemaMismatchError):
        long_to_wide(coded, index=INDEX)


def test_long_to_wide_accepts_categorical_keys(long_production):
    categorical = long_production.with_columns(pl.col("measurement_type").cast(pl.Categorical))
    assert long_to_wide(categorical, index=INDEX).columns == INDEX + ["oil", "water"]


def test_long_to_wide_empty_table(long_production):
    assert long_to_wide(long_production.head(0), index=INDEX).columns == INDEX


def test_wide_to_long_keeps_or_drops_missing(long_production):
    wide = long_to_wide(long_production, index=INDEX)
    kept = wide_to_long(wide, index=INDEX)
    dropped = wide_to_long(wide, index=INDEX, drop_missing=True)
    assert kept.height == 4
    assert dropped.height == 3
    assert kept.filter(pl.col("volume").is_null()).rows() == [(1, date(2020, 2, 1), "water", None)]


def test_wide_to_long_with_fold_only(long_production):
    wide = long_to_wide(long_production, index=INDEX)
    folded = wide_to_long(wide, fold=["oil"])
    assert folded.columns == ["well_id", "production_date", "water", "measurement_type", "volume"]
    assert folded.get_column("measurement_type").unique().to_list() == ["oil"]


def test_wide_to_long_needs_index_or_fold(long_production):
    wide = long_to_wide(long_production, index=INDEX)
    with pytest.raises(InvalidDataException):
        wide_to_long(wide)
    with pytest.raises(InvalidDataException):
        wide_to_long(wide, index=INDEX, fold=["well_id", "oil"])


def test_reshape_accepts_direction_strings(long_production):
    wide = reshape(long_production, "long_to_wide", "measurement_type", "volume", index=INDEX)
    assert wide.height == 2


facts = st.dictionaries(
    keys=st.tuples(
        st.integers(min_value=1, max_value=5),
        st.integers(min_value=1, max_value=6),
        st.sampled_from(["oil", "gas", "water", "hours"]),
    ),
    values=st.floats(min_value=0, max_value=1e6, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=40,
)


def to_long(fact_map):
    return pl.DataFrame(
        {
            "well_id": [well for well, _, _ in fact_map],
            "production_date": [date(2020, month, 1) for _, month, _ in fact_map],
            "measurement_type": [kind for _, _, kind in fact_map],
            "volume": list(fact_map.values()),
        },
        schema={"well_id": pl.Int64, "production_date": pl.Date, "measurement_type": pl.Utf8, "volume": pl.Float64},
    )


@hypothesis_settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(facts)
def test_round_trip_reproduces_facts(fact_map):
    long = to_long(fact_map)
    wide = long_to_wide(long, index=INDEX)
    back = wide_to_long(wide, index=INDEX, drop_missing=True)

    assert set(back.rows()) == set(long.rows())
    # One wide column per distinct measurement type
    assert set(wide.columns) - set(INDEX) == set(long.get_column("measurement_type").to_list())
