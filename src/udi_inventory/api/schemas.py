"""Pydantic request/response schemas for UDI Inventory API."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from udi_inventory.core.models import ExpirationTier, LocationContext, RecordDraft, ScanMode


# Request models


class ScanRequest(BaseModel):
    """Request body for parsing a raw scan."""

    raw: str = Field(..., description="Raw string delivered by the scanner")


class LocationRequest(BaseModel):
    """Location context sent along with a scan or count."""

    id: str
    name: str
    hospital: str | None = None
    department: str | None = None
    floor: str | None = None
    area: str | None = None

    def to_context(self) -> LocationContext:
        return LocationContext(**self.model_dump())


class ScanReviewRequest(BaseModel):
    """Request body for preparing a draft from a barcode scan."""

    raw: str = Field(..., description="Raw string delivered by the scanner")
    quantity: int | None = Field(default=None, ge=1, description="Units counted")
    location: LocationRequest | None = None


class CountReviewRequest(BaseModel):
    """Request body for preparing a draft from a direct count."""

    quantity: int = Field(..., ge=1, description="Units counted")
    location: LocationRequest | None = None


class ClassifyRequest(BaseModel):
    """Request body for classifying an expiration date."""

    expiration_date: str = Field(..., description="ISO date, e.g. 2025-06-15")
    now: datetime | None = Field(default=None, description="Reference time, defaults to now")


class DraftRequest(BaseModel):
    """A draft record to store."""

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

    def to_draft(self) -> RecordDraft:
        return RecordDraft(**self.model_dump())


# Response models


class ParsedIdentifierResponse(BaseModel):
    """Fields extracted from a scan. Absent fields are null."""

    product_id: str | None
    lot: str | None
    expiration_date: str | None
    serial: str | None

    model_config = {"from_attributes": True}


class DraftResponse(DraftRequest):
    """A draft record prepared from a scan."""

    model_config = {"from_attributes": True}


class ScanReviewResponse(BaseModel):
    """A prepared draft awaiting confirmation."""

    draft: DraftResponse
    mode: ScanMode
    missing_data: bool
    warnings: list[str]

    model_config = {"from_attributes": True}


class ClassifyResponse(BaseModel):
    """Expiration tier of a date."""

    expiration_date: str
    days_remaining: int
    tier: ExpirationTier
    label: str


class RecordResponse(BaseModel):
    """A stored inventory record."""

    record_id: UUID
    added_at: datetime
    name: str
    product_id: str
    lot: str
    serial: str | None
    expiration_date: date
    location: str
    hospital: str | None
    department: str | None
    floor: str | None
    area: str | None
    quantity: int
    is_synced: bool
    tier: ExpirationTier | None = None

    model_config = {"from_attributes": True}


class RecordListResponse(BaseModel):
    """Response for record list."""

    items: list[RecordResponse]
    total_items: int


class RecordCreatedResponse(BaseModel):
    """Response for a stored draft."""

    record_id: UUID


class DashboardResponse(BaseModel):
    """Inventory totals, tier counts and recent additions."""

    active_items: int
    expired: int
    critical: int
    warning: int
    good: int
    recent_items: list[RecordResponse]


class ExpirationBucketResponse(BaseModel):
    """Records in a single tier."""

    tier: ExpirationTier
    label: str
    count: int
    items: list[RecordResponse]


class ExpirationOverviewResponse(BaseModel):
    """Records bucketed by tier, worst first."""

    buckets: list[ExpirationBucketResponse]


class HealthResponse(BaseModel):
    """Response for health check."""

    status: str
    version: str
    database: str
