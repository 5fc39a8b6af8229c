# This file defines the source table schemas for the pipeline.
# The schemas are defined as a list of dictionaries, which are then used to create Schema objects.
# Column names are the canonical (lowercase, underscore) forms.

SCHEMAS_METADATA = [
    {
        "name": "well_headers",
        "description": "Static attributes of each physical well.",
        "primary_key": ["well_id"],
        "properties": [
            {"name": "well_id", "type": "integer", "required": True, "primary_key": True},
            {"name": "well_name", "type": "string"},
            {"name": "operator", "type": "string"},
            {"name": "formation", "type": "string"},
            {"name": "latitude", "type": "number"},
            {"name": "longitude", "type": "number"},
            {"name": "spud_date", "type": "date", "description": "Date drilling started"},
            {"name": "total_depth_ft", "type": "number"},
        ],
    },
    {
        "name": "well_treatments",
        "description": "Completion treatments, one row per well and stage.",
        "primary_key": ["well_id", "stage_number"],
        "properties": [
            {"name": "well_id", "type": "integer", "required": True, "primary_key": True},
            {"name": "stage_number", "type": "integer", "primary_key": True},
            {"name": "treatment_date", "type": "date"},
            {"name": "fluid_volume_bbl", "type": "number"},
            {"name": "proppant_mass_lbs", "type": "number"},
        ],
    },
    {
        "name": "well_production",
        "description": "Long-format production, one row per well, period and measurement type.",
        "primary_key": ["well_id", "production_date", "measurement_type"],
        "properties": [
            {"name": "well_id", "type": "integer", "required": True, "primary_key": True},
            {"name": "production_date", "type": "date", "required": True, "primary_key": True},
            {"name": "measurement_type", "type": "string", "required": True, "primary_key": True},
            {"name": "volume", "type": "number", "required": True},
        ],
    },
]
