"""
Data Contract: Board Rooms Output Schema

Validates the "rooms" list written to events.json.
"""

import pandera as pa
from pandera.typing import Series

from ..config.room_catalog import GROUP_FIELDHOUSE, GROUP_NORTH, GROUP_SOUTH


class RoomsSchema(pa.DataFrameModel):
    """Contract for events.json "rooms" (display order preserved)."""

    id: Series[str] = pa.Field(nullable=False, unique=True)
    label: Series[str] = pa.Field(nullable=False)
    group: Series[str] = pa.Field(
        nullable=False,
        isin=[GROUP_SOUTH, GROUP_FIELDHOUSE, GROUP_NORTH],
    )

    class Config:
        strict = True
        coerce = True
