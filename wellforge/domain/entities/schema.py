"""
Schema domain entities for typed, load-time column validation.
"""
from typing import List, Dict, Any, Optional, Iterable
from pydantic import BaseModel, Field, field_validator
from enum import Enum
import re
import polars as pl

from wellforge.domain.exceptions import SchemaMismatchError


_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def canonicalize_column_name(name: str) -> str:
    """Lowercase, trim and collapse punctuation/whitespace runs into underscores."""
    return _NON_ALNUM.sub("_", name.strip().lower()).strip("_")


class DataType(str, Enum):
    """Supported data types for schema properties."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


class SchemaProperty(BaseModel):
    """Schema property definition."""
    name: str
    type: DataType
    required: bool = False
    primary_key: bool = False
    description: Optional[str] = None


class Schema(BaseModel):
    """Ordered, typed column set for one source table."""
    name: str
    description: str
    primary_key: List[str] = Field(default_factory=list)
    properties: List[SchemaProperty]
    version: str = "1.0"

    @field_validator('properties')
    @classmethod
    def validate_properties(cls, properties):
        """Ensure property names are unique."""
        names = [prop.name for prop in properties]
        if len(names) != len(set(names)):
            raise ValueError("Property names must be unique")
        return properties

    @property
    def column_names(self) -> List[str]:
        return [prop.name for prop in self.properties]

    def get_property(self, name: str) -> Optional[SchemaProperty]:
        """Get a property by name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def get_primary_key_properties(self) -> List[SchemaProperty]:
        """Get all properties that are part of the primary key."""
        return [prop for prop in self.properties if prop.primary_key]

    def get_required_properties(self) -> List[SchemaProperty]:
        """Get all required properties."""
        return [prop for prop in self.properties if prop.required]

    def get_date_columns(self) -> List[str]:
        """Get date and datetime column names."""
        return [
            prop.name for prop in self.properties
            if prop.type in [DataType.DATE, DataType.DATETIME]
        ]

    def validate_columns(self, columns: Iterable[str]) -> None:
        """Raise SchemaMismatchError listing every required column that is absent."""
        present = set(columns)
        missing = [prop.name for prop in self.get_required_properties() if prop.name not in present]
        if missing:
            raise SchemaMismatchError(
                f"Schema '{self.name}' expects column(s) {missing}; found {sorted(present)}"
            )

    def to_polars_schema(self) -> Dict[str, Any]:
        """Convert schema to Polars schema format."""
        polars_schema = {}
        for prop in self.properties:
            if prop.type == DataType.STRING:
                polars_schema[prop.name] = pl.Utf8
            elif prop.type == DataType.INTEGER:
                polars_schema[prop.name] = pl.Int64
            elif prop.type == DataType.NUMBER:
                polars_schema[prop.name] = pl.Float64
            elif prop.type == DataType.BOOLEAN:
                polars_schema[prop.name] = pl.Boolean
            elif prop.type == DataType.DATE:
                polars_schema[prop.name] = pl.Date
            elif prop.type == DataType.DATETIME:
                polars_schema[prop.name] = pl.Datetime
            else:
                polars_schema[prop.name] = pl.Utf8  # Default fallback
        return polars_schema
