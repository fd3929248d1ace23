"""
Data Contract: Board Slots Output Schema

This schema is the single source of truth for the "slots" list written
to events.json.

Validated at runtime, not statically.
"""

from typing import Iterable

import pandas as pd
import pandera as pa
from pandera.typing import Series

from ..stage1_clean.time_ranges import MINUTES_PER_DAY


class SlotsSchema(pa.DataFrameModel):
    """
    Contract for events.json "slots".

    One row per (room, booking); already sorted and deduplicated.
    """

    # =====================================================
    # Placement
    # =====================================================

    roomId: Series[str] = pa.Field(nullable=False)

    # Minutes since local midnight; end may pass midnight
    startMinute: Series[int] = pa.Field(nullable=False, ge=0, lt=MINUTES_PER_DAY)
    endMinute: Series[int] = pa.Field(nullable=False, gt=0, lt=2 * MINUTES_PER_DAY)

    # =====================================================
    # Display text (empty string, never null)
    # =====================================================

    title: Series[str] = pa.Field(nullable=False, str_length={"min_value": 1})
    subtitle: Series[str] = pa.Field(nullable=False)
    org: Series[str] = pa.Field(nullable=False)
    contact: Series[str] = pa.Field(nullable=False)

    class Config:
        strict = True  # Board reads exactly these keys
        coerce = True
        unique = ["roomId", "startMinute", "endMinute", "title", "subtitle"]

    @pa.dataframe_check(name="end_after_start")
    def validate_end_after_start(cls, df: pd.DataFrame) -> Series[bool]:
        """A slot must have positive length."""
        return df["endMinute"] > df["startMinute"]


def slots_schema_for(room_ids: Iterable[str]) -> pa.DataFrameSchema:
    """SlotsSchema restricted to the rooms on today's board."""
    schema = SlotsSchema.to_schema()
    return schema.update_column("roomId", checks=[pa.Check.isin(list(room_ids))])
