"""Data access layer."""
from trestle.repositories.base import Repository  # noqa: F401
