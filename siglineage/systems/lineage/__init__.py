"""
SigLineage — Lineage System

Alignment of rotation histories and the queries built on it: ancestry,
capability resolution, merge, and digest membership.
"""

from siglineage.systems.lineage.service import LineageEngine

__all__ = ["LineageEngine"]
