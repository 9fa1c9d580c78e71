"""Pipeline orchestrators.

Each orchestrator is one CLI command run end to end:
1. ``build``: validate and canonicalize every record, publish the core artifacts
2. ``dist``: derive the minified, combined and legacy artifacts
3. ``stats``: report input file sizes
"""
