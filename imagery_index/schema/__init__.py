"""Bundled JSON Schemas (GeoJSON, region feature, imagery source)."""
