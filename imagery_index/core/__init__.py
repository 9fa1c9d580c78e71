"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (worldwide ids, artifact paths, CDN base)
- exceptions: Custom exception hierarchy
"""
