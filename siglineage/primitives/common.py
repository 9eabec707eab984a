"""
SigLineage — Common Primitives

Shared base classes used across all systems.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SigLineageBaseModel(BaseModel):
    """Base model for all primitives. Instances are immutable once validated."""

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )
