"""Pipeline stages.

Each stage is a plain function (or a small class where it holds state
across calls) consumed by the build and dist orchestrators:

- load_records: glob and JSON-parse input files
- validate_schema: JSON Schema validation against the bundled schemas
- normalize_feature: canonical region records (winding, precision, id)
- normalize_source: canonical imagery source records (field table)
- resolve_location: location-set resolution to concrete geometry
- aggregate: combined per-region output and translation strings
- rewrite: idempotent write-back and artifact writing
- export_legacy: legacy GeoJSON / JSON / XML exports
"""
