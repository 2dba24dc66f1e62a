"""Per-version DTO schemas and their codecs."""
