import pytest
from pydantic import ValidationError
from wellforge.domain.entities.schema import Schema, SchemaProperty, DataType, canonicalize_column_name
from wellforge.domain.exceptions import (
    DomainException, MissingFileError, ParseError, DuplicateKeyError,
    NonUniqueJoinKeyError, SchemaMismatchError, SchemaNotFoundException, InvalidDataException
)


def make_schema():
    return Schema(
        name="wells",
        description="A test schema",
        primary_key=["well_id"],
        properties=[
            SchemaProperty(name="well_id", type="integer", required=True, primary_key=True),
            SchemaProperty(name="spud_date", type="date"),
            SchemaProperty(name="operator", type="string", required=True),
        ],
    )


def test_schema_property_and_schema():
    schema = make_schema()
    assert schema.name == "wells"
    assert schema.column_names == ["well_id", "spud_date", "operator"]
    assert schema.get_property("spud_date").type == DataType.DATE
    assert schema.get_property("missing") is None
    assert [p.name for p in schema.get_primary_key_properties()] == ["well_id"]
    assert [p.name for p in schema.get_required_properties()] == ["well_id", "operator"]
    assert schema.get_date_columns() == ["spud_date"]


def test_schema_rejects_duplicate_property_names():
    with pytest.raises(ValidationError):
        Schema(
            name="S", description="",
            properties=[
                SchemaProperty(name="a", type="string"),
                SchemaProperty(name="a", type="integer"),
            ],
        )


def test_validate_columns_lists_every_missing_required_column():
    schema = make_schema()
    schema.validate_columns(["well_id", "operator", "extra"])
    with pytest.raises(SchemaMismatchError) as excinfo:
        schema.validate_columns(["spud_date"])
    assert "well_id" in str(excinfo.value)
    assert "operator" in str(excinfo.value)


def test_to_polars_schema():
    import polars as pl
    polars_schema = make_schema().to_polars_schema()
    assert polars_schema == {"well_id": pl.Int64, "spud_date": pl.Date, "operator": pl.Utf8}


@pytest.mark.parametrize("raw,expected", [
    ("Well ID", "well_id"),
    ("  Production Date ", "production_date"),
    ("Total Depth (ft)", "total_depth_ft"),
    ("API-Number", "api_number"),
    ("volume", "volume"),
])
def test_canonicalize_column_name(raw, expected):
    assert canonicalize_column_name(raw) == expected


def test_domain_exceptions():
    for exc in (MissingFileError, ParseError, DuplicateKeyError, NonUniqueJoinKeyError,
                SchemaMismatchError, SchemaNotFoundException, InvalidDataException):
        with pytest.raises(DomainException):
            raise exc("boom")
    # Callers that only know about missing files still catch it
    with pytest.raises(FileNotFoundError):
        raise MissingFileError("gone")
