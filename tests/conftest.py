"""Shared fixtures for building export rows in tests."""

import pandas as pd
import pytest

from facility_board.config.column_mappings import REQUIRED_FIELDS

TARGET_LOCATION = "Athletic & Event Center"


def make_rows(*records) -> pd.DataFrame:
    """
    Build logical-field rows from (facility, reserved_time, reservee, purpose)
    tuples, optionally prefixed with a location.
    """
    rows = []
    for record in records:
        if len(record) == 4:
            record = (TARGET_LOCATION,) + tuple(record)
        rows.append(dict(zip(REQUIRED_FIELDS, record)))
    return pd.DataFrame(rows, columns=REQUIRED_FIELDS)


@pytest.fixture
def rows_factory():
    return make_rows
