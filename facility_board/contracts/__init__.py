"""
Data Contracts Package

Contains Pandera schema definitions for validating the board feed.
These are the single source of truth for the output format.

Usage:
    from facility_board.contracts import RoomsSchema, SlotsSchema

    # Validate a DataFrame
    SlotsSchema.validate(df)

    # Restrict slots to the rooms on today's board
    slots_schema_for(room_ids).validate(df)
"""

from .rooms_schema import RoomsSchema
from .slots_schema import SlotsSchema, slots_schema_for

__all__ = [
    "RoomsSchema",
    "SlotsSchema",
    "slots_schema_for",
]
