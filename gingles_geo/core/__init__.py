"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Coordinate bounds, H3 limits, units and tolerances
- exceptions: Custom exception hierarchy
"""
