"""
Error taxonomy for the pricing engine.

Validation errors derive from ValueError so callers that already guard
administrative edits with `except ValueError` keep working.
"""


class PricingError(Exception):
    """Base class for all pricing engine errors."""


class ValidationError(PricingError, ValueError):
    """A mutating call was rejected; no state was changed."""


class InvalidSizeFormat(ValidationError):
    """Size string does not match `<int>x<int>`."""


class UnknownZoneError(ValidationError, KeyError):
    """Referenced zone does not exist in the store."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else 'Unknown zone'


class UnknownSizeError(ValidationError, KeyError):
    """Referenced size is not part of the process-wide size set."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else 'Unknown size'


class ZoneExistsError(ValidationError):
    """A zone with the same name is already priced."""


class DuplicatePackageError(ValidationError):
    """Two duration packages share the same duration value."""


class LastZoneError(ValidationError):
    """Removing the zone would leave the store without zones."""


class LastSizeError(ValidationError):
    """Removing the size would leave the store without sizes."""


class NoZonesConfiguredError(PricingError):
    """Zone resolution was requested but the store holds no zones."""


class UnpricedItemError(PricingError):
    """A quote line resolved to an unconfigured (zero) price and quoting is blocked."""

    def __init__(self, message: str, billboard_ids: list[str]):
        super().__init__(message)
        self.billboard_ids = billboard_ids


class ExternalIOFailure(PricingError):
    """The inventory feed or the persistence collaborator could not be reached."""
