"""
Vehicle Return Reconciliation

Validates the readings a borrower submits when handing a vehicle back and
derives the distance traveled. The organization's return-verification
policy decides whether photos are mandatory and whether a second person
must confirm the return.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping
from uuid import UUID

from apps.bookings.domain.exceptions import MissingEvidence, ValidationError

# Matches the odometer columns: max_digits=10, decimal_places=1
ODOMETER_STEP = Decimal("0.1")
ODOMETER_MAX = Decimal("999999999.9")


@dataclass(frozen=True)
class ReturnVerificationPolicy:
    """
    Organization setting for vehicle returns

    ``enabled`` switches the photo rule only. A second person confirms the
    return whenever ``require_verification`` is set.
    """
    enabled: bool = False
    require_photo: bool = True
    require_verification: bool = False

    @classmethod
    def from_settings(cls, data: Mapping[str, Any] | None) -> ReturnVerificationPolicy:
        data = data or {}
        return cls(
            enabled=bool(data.get('enabled', False)),
            require_photo=bool(data.get('require_photo', True)),
            require_verification=bool(data.get('require_verification', False)),
        )

    @property
    def photos_required(self) -> bool:
        return self.enabled and self.require_photo

    @property
    def verification_required(self) -> bool:
        return self.require_verification


@dataclass(frozen=True)
class ReturnPhotos:
    odometer_image: str | None = None
    exterior_image: str | None = None

    @property
    def complete(self) -> bool:
        return bool(self.odometer_image) and bool(self.exterior_image)


@dataclass(frozen=True)
class ReturnOutcome:
    reservation_id: UUID
    odometer_reading: Decimal
    distance_traveled: Decimal | None
    status: str
    return_status: str
    verification_pending: bool


def parse_odometer(value) -> Decimal:
    """Odometer reading as a finite, non-negative Decimal with one decimal place"""
    if value is None or isinstance(value, bool) or value == '':
        raise ValidationError("Odometer reading is required")
    try:
        reading = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Odometer reading must be a number, got {value!r}")
    if not reading.is_finite():
        raise ValidationError(f"Odometer reading must be a number, got {value!r}")
    if reading < 0:
        raise ValidationError("Odometer reading cannot be negative")
    if reading > ODOMETER_MAX:
        raise ValidationError(f"Odometer reading cannot exceed {ODOMETER_MAX}")
    return reading.quantize(ODOMETER_STEP, rounding=ROUND_HALF_UP)


def compute_distance(start_reading: Decimal | None, final_reading: Decimal) -> Decimal | None:
    """
    Distance traveled between the two readings

    Returns None when the start reading is unknown.

    Raises:
        ValidationError: final reading is below the start reading
    """
    if start_reading is None:
        return None
    if final_reading < start_reading:
        raise ValidationError(
            f"Final odometer reading {final_reading} is below the start reading {start_reading}"
        )
    return final_reading - start_reading


def check_evidence(photos: ReturnPhotos, policy: ReturnVerificationPolicy) -> None:
    if policy.photos_required and not photos.complete:
        raise MissingEvidence("Both the odometer photo and the exterior photo are required")
