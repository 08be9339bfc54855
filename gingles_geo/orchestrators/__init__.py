"""Pipeline entry points.

Coordinates the activities for one caller request:
1. Ingest → validate both feature collections
2. Index → fan out H3 indexing per feature
3. Assemble → crosswalk entries + quality metrics

Compactness requests validate and score districts directly.
"""
