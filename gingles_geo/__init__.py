"""Geographic alignment and compactness engine.

Aligns two sets of geographic features (e.g. census blocks and voting
precincts) through a shared H3 hexagonal grid, producing a weighted
crosswalk with quality metrics, and scores district shapes with the
Polsby-Popper, Reock and convex hull compactness measures.
"""

__version__ = "0.1.0"
