"""Domain models for UDI Inventory."""

from dataclasses import dataclass, field
from enum import Enum


class ScanMode(str, Enum):
    """How a scan source delivers input."""

    BARCODE = "BARCODE"
    COUNTING = "COUNTING"


class ExpirationTier(str, Enum):
    """Expiration risk tier, ordered from worst to best."""

    EXPIRED = "EXPIRED"
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    GOOD = "GOOD"

    @property
    def rank(self) -> int:
        """Position in the worst-to-best order (EXPIRED is 0)."""
        return _TIER_ORDER.index(self)

    @property
    def label(self) -> str:
        """Human readable label."""
        return _TIER_LABELS[self]

    def __lt__(self, other):
        if not isinstance(other, ExpirationTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ExpirationTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ExpirationTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ExpirationTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_ORDER = list(ExpirationTier)

_TIER_LABELS = {
    ExpirationTier.EXPIRED: "Expired",
    ExpirationTier.CRITICAL: "Critical (<7d)",
    ExpirationTier.WARNING: "Warning (7-30d)",
    ExpirationTier.GOOD: "Good (>30d)",
}


@dataclass(frozen=True)
class LocationContext:
    """Where a count is taking place."""

    id: str
    name: str
    hospital: str | None = None
    department: str | None = None
    floor: str | None = None
    area: str | None = None


@dataclass
class RecordDraft:
    """An inventory record that has not been stored yet."""

    name: str = ""
    product_id: str = ""
    lot: str = ""
    serial: str | None = None
    expiration_date: str = ""
    location: str = ""
    hospital: str | None = None
    department: str | None = None
    floor: str | None = None
    area: str | None = None
    quantity: int = 1

    def apply_location(self, location: LocationContext | None) -> None:
        """Copy location context onto the draft."""
        if location is None:
            return
        self.location = location.name
        self.hospital = location.hospital
        self.department = location.department
        self.floor = location.floor
        self.area = location.area


@dataclass
class ScanReview:
    """A draft prepared from a scan, awaiting user confirmation."""

    draft: RecordDraft
    mode: ScanMode = ScanMode.BARCODE
    # Expiration date or lot was not in the barcode
    missing_data: bool = False
    warnings: list[str] = field(default_factory=list)
