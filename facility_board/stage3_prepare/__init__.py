"""Stage 3: display text and board assembly."""
