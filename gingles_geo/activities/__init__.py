"""Engine activity functions.

Each activity performs a single unit of work within a pipeline run:
- ingest_geometry: Validate GeoJSON geometry, features and collections
- index_cells: Convert geometry to H3 cell sets
- build_crosswalk: Weighted source → target mapping over shared cells
- quality_metrics: Coverage and accuracy of a crosswalk
- calculate_compactness: Polsby-Popper, Reock, convex hull ratio
"""
