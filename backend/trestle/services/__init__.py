"""Business logic: one service class per (resource, API version)."""
