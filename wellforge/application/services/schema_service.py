"""
Schema service for managing and loading schema configurations.
"""
from typing import Dict, List, Optional
from wellforge.domain.entities.schema import Schema, SchemaProperty, DataType
from wellforge.domain.exceptions import SchemaNotFoundException
from wellforge.infrastructure.persistence.metadata.schema_config import SCHEMAS_METADATA


class SchemaService:
    """Schema service with caching of the declarative metadata."""

    def __init__(self, metadata: Optional[List[dict]] = None):
        self._schema_cache: Dict[str, Schema] = {}
        self._load_schemas(SCHEMAS_METADATA if metadata is None else metadata)

    def _load_schemas(self, metadata: List[dict]) -> None:
        """Load all schemas from configuration and cache them."""
        for schema_config in metadata:
            schema_properties = []

            for prop_config in schema_config["properties"]:
                # Map string types to enum types
                data_type = self._map_type(prop_config["type"])

                schema_prop = SchemaProperty(
                    name=prop_config["name"],
                    type=data_type,
                    required=prop_config.get("required", False),
                    primary_key=prop_config.get("primary_key", False),
                    description=prop_config.get("description")
                )
                schema_properties.append(schema_prop)

            schema = Schema(
                name=schema_config["name"],
                description=schema_config["description"],
                primary_key=schema_config.get("primary_key", []),
                properties=schema_properties
            )

            self._schema_cache[schema.name] = schema

    def _map_type(self, type_str: str) -> DataType:
        """Map string type to DataType enum."""
        type_mapping = {
            "string": DataType.STRING,
            "integer": DataType.INTEGER,
            "number": DataType.NUMBER,
            "boolean": DataType.BOOLEAN,
            "date": DataType.DATE,
            "datetime": DataType.DATETIME,
        }
        return type_mapping.get(type_str, DataType.STRING)

    def get_schema(self, schema_name: str) -> Optional[Schema]:
        """Get schema by name with caching."""
        return self._schema_cache.get(schema_name)

    def require_schema(self, schema_name: str) -> Schema:
        """Get schema by name, raising if it is not configured."""
        schema = self.get_schema(schema_name)
        if schema is None:
            raise SchemaNotFoundException(
                f"Schema '{schema_name}' not found. Available: {self.get_schema_names()}"
            )
        return schema

    def get_all_schemas(self) -> List[Schema]:
        """Get all available schemas."""
        return list(self._schema_cache.values())

    def get_schema_names(self) -> List[str]:
        """Get all available schema names."""
        return list(self._schema_cache.keys())


# Global schema service instance
schema_service = SchemaService()
