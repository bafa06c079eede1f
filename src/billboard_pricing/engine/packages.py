"""
Duration package catalog.
"""
import logging
from typing import Iterable, Optional

from .errors import DuplicatePackageError, ValidationError
from .models import DurationPackage

logger = logging.getLogger(__name__)


class DurationCatalog:
    """
    Ordered catalog of sellable rental terms, one per duration value.

    Discounts are expected to be non-decreasing with duration; this is
    reported by `check_monotonic` rather than enforced.
    """

    def __init__(self, packages: Optional[Iterable[DurationPackage]] = None):
        self._packages: dict[int, DurationPackage] = {}
        for package in packages or []:
            self.add(package)
        for warning in self.check_monotonic():
            logger.warning("Duration catalog: %s", warning)

    def add(self, package: DurationPackage) -> None:
        if package.duration_value <= 0:
            raise ValidationError(f"Duration must be positive, got {package.duration_value}")
        if not 0 <= package.discount_percent <= 100:
            raise ValidationError(
                f"Discount must be between 0 and 100, got {package.discount_percent}"
            )
        if package.duration_value in self._packages:
            raise DuplicatePackageError(
                f"A package for duration {package.duration_value} already exists"
            )
        self._packages[package.duration_value] = package

    def remove(self, duration_value: int) -> DurationPackage:
        if duration_value not in self._packages:
            raise ValidationError(f"No package for duration {duration_value}")
        return self._packages.pop(duration_value)

    def get(self, duration_value: int) -> Optional[DurationPackage]:
        return self._packages.get(int(duration_value))

    def packages(self) -> list[DurationPackage]:
        return [self._packages[k] for k in sorted(self._packages)]

    def __len__(self) -> int:
        return len(self._packages)

    def check_monotonic(self) -> list[str]:
        warnings = []
        previous: Optional[DurationPackage] = None
        for package in self.packages():
            if previous and package.discount_percent < previous.discount_percent:
                warnings.append(
                    f"{package.duration_value}-period discount {package.discount_percent}% is lower "
                    f"than {previous.duration_value}-period discount {previous.discount_percent}%"
                )
            previous = package
        return warnings

    def to_document(self) -> list[dict]:
        return [p.to_dict() for p in self.packages()]

    @classmethod
    def from_document(cls, rows: Optional[list[dict]]) -> 'DurationCatalog':
        return cls(DurationPackage.from_dict(r) for r in rows or [])
