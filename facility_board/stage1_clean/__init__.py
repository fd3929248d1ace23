"""Stage 1: read, parse, and filter the daily export."""
