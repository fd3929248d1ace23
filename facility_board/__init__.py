"""
Facility Board

Builds the lobby display board's events.json from the daily facility
schedule export.
"""

__version__ = "0.1.0"
