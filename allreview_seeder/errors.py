"""Exception hierarchy for the seeding pipeline."""

from __future__ import annotations


class SeederError(Exception):
    """Base class for all seeder errors."""


class AcquisitionError(SeederError):
    """A feed or image provider request failed or returned unusable data."""


class CatalogError(SeederError):
    """A catalog store call failed."""

    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.operation = operation


class ConfigurationError(SeederError):
    """Mandatory configuration is missing or invalid."""
