"""Imagery Index build pipeline.

Validates, normalizes and republishes a catalog of imagery sources
(tile / WMS endpoints) together with the named regions that describe
each source's coverage area, and generates the legacy export formats
consumed by older editors.
"""

__version__ = "0.1.0"
