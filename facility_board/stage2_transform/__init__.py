"""Stage 2: Mode detection, facility classification, and booking grouping."""
