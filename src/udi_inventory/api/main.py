"""FastAPI application for UDI Inventory."""

from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from udi_inventory import __version__
from udi_inventory.api.barcode_parser import parse_identifier
from udi_inventory.api.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    CountReviewRequest,
    DashboardResponse,
    DraftRequest,
    DraftResponse,
    ExpirationBucketResponse,
    ExpirationOverviewResponse,
    HealthResponse,
    ParsedIdentifierResponse,
    RecordCreatedResponse,
    RecordListResponse,
    RecordResponse,
    ScanRequest,
    ScanReviewRequest,
    ScanReviewResponse,
)
from udi_inventory.config import configure_logging
from udi_inventory.core.expiration import (
    InvalidExpirationDateError,
    days_until_expiration,
    tier_for_days,
)
from udi_inventory.core.inventory_service import (
    DraftValidationError,
    InventoryService,
    get_service,
)
from udi_inventory.core.models import ExpirationTier, ScanReview
from udi_inventory.db.postgres import PostgresRecordStore
from udi_inventory.db.schemas import InventoryRecord
from udi_inventory.db.store import RecordNotFoundError, RecordStoreError

configure_logging()
logger = structlog.get_logger()

app = FastAPI(
    title="UDI Inventory API",
    description="Barcode-based medical supply counting with expiration tracking",
    version=__version__,
)

# CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _record_response(
    record: InventoryRecord, tier: ExpirationTier | None = None
) -> RecordResponse:
    response = RecordResponse.model_validate(record)
    response.tier = tier
    return response


def _review_response(review: ScanReview) -> ScanReviewResponse:
    return ScanReviewResponse(
        draft=DraftResponse.model_validate(review.draft),
        mode=review.mode,
        missing_data=review.missing_data,
        warnings=review.warnings,
    )


@app.get("/api/health", response_model=HealthResponse)
async def health(service: InventoryService = Depends(get_service)) -> HealthResponse:
    """Health check endpoint with record store status."""
    if isinstance(service.store, PostgresRecordStore):
        db_status = "connected" if service.store.health_check() else "disconnected"
    else:
        db_status = "offline"
    return HealthResponse(
        status="ok",
        version=__version__,
        database=db_status,
    )


@app.post("/api/scan/parse", response_model=ParsedIdentifierResponse)
async def parse_scan(request: ScanRequest) -> ParsedIdentifierResponse:
    """Extract product id, lot, expiration date and serial from a raw scan.

    Never fails: unrecognized input yields a partial result.
    """
    return ParsedIdentifierResponse.model_validate(parse_identifier(request.raw))


@app.post("/api/scan/review", response_model=ScanReviewResponse)
async def review_scan(
    request: ScanReviewRequest, service: InventoryService = Depends(get_service)
) -> ScanReviewResponse:
    """Prepare a draft record from a barcode scan for the user to confirm."""
    review = service.review_scan(
        request.raw,
        location=request.location.to_context() if request.location else None,
        quantity=request.quantity,
    )
    return _review_response(review)


@app.post("/api/scan/count", response_model=ScanReviewResponse)
async def review_count(
    request: CountReviewRequest, service: InventoryService = Depends(get_service)
) -> ScanReviewResponse:
    """Prepare a draft record from a direct quantity count."""
    review = service.review_count(
        request.quantity,
        location=request.location.to_context() if request.location else None,
    )
    return _review_response(review)


@app.post("/api/expiration/classify", response_model=ClassifyResponse)
async def classify(
    request: ClassifyRequest, service: InventoryService = Depends(get_service)
) -> ClassifyResponse:
    """Classify an expiration date into its tier."""
    now = request.now or datetime.now(timezone.utc)
    try:
        days = days_until_expiration(request.expiration_date, now)
    except InvalidExpirationDateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    tier = tier_for_days(days, service.thresholds)
    return ClassifyResponse(
        expiration_date=request.expiration_date,
        days_remaining=days,
        tier=tier,
        label=tier.label,
    )


@app.get("/api/items", response_model=RecordListResponse)
async def list_items(
    search: str = Query("", description="Match on name, location or product id"),
    tier: ExpirationTier | None = Query(None, description="Only records in this tier"),
    service: InventoryService = Depends(get_service),
) -> RecordListResponse:
    """List records, most recently added first, with their tiers."""
    now = datetime.now(timezone.utc)
    try:
        records = service.search(search, tier=tier, now=now)
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    items = [_record_response(record, service.classify(record, now)) for record in records]
    return RecordListResponse(items=items, total_items=len(items))


@app.get("/api/items/{record_id}", response_model=RecordResponse)
async def get_item(
    record_id: UUID, service: InventoryService = Depends(get_service)
) -> RecordResponse:
    """Get a single record with its tier."""
    try:
        record = service.get_record(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return _record_response(record, service.classify(record))


@app.post("/api/items", response_model=RecordCreatedResponse, status_code=201)
async def create_item(
    request: DraftRequest, service: InventoryService = Depends(get_service)
) -> RecordCreatedResponse:
    """Store a confirmed draft. Name and expiration date are required."""
    try:
        record_id = service.add_record(request.to_draft())
    except DraftValidationError as e:
        raise HTTPException(status_code=400, detail=e.problems)
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return RecordCreatedResponse(record_id=record_id)


@app.delete("/api/items/{record_id}", status_code=204)
async def delete_item(
    record_id: UUID, service: InventoryService = Depends(get_service)
) -> None:
    """Delete a record."""
    try:
        service.remove_record(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/api/dashboard", response_model=DashboardResponse)
async def dashboard(service: InventoryService = Depends(get_service)) -> DashboardResponse:
    """Get inventory totals, counts per tier and the latest additions."""
    now = datetime.now(timezone.utc)
    try:
        summary = service.summarize(now)
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    counts = summary.tier_counts
    return DashboardResponse(
        active_items=summary.active_items,
        expired=counts[ExpirationTier.EXPIRED],
        critical=counts[ExpirationTier.CRITICAL],
        warning=counts[ExpirationTier.WARNING],
        good=counts[ExpirationTier.GOOD],
        recent_items=[
            _record_response(record, service.classify(record, now))
            for record in summary.recent_items
        ],
    )


@app.get("/api/expiration/overview", response_model=ExpirationOverviewResponse)
async def expiration_overview(
    service: InventoryService = Depends(get_service),
) -> ExpirationOverviewResponse:
    """Get records bucketed by tier, worst first."""
    try:
        buckets = service.overview()
    except RecordStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return ExpirationOverviewResponse(
        buckets=[
            ExpirationBucketResponse(
                tier=tier,
                label=tier.label,
                count=len(records),
                items=[_record_response(record, tier) for record in records],
            )
            for tier, records in buckets.items()
        ]
    )


# Serve static files for frontend (when built)
frontend_dist = Path(__file__).parent.parent.parent.parent / "frontend" / "dist"
if frontend_dist.exists():
    app.mount("/", StaticFiles(directory=str(frontend_dist), html=True), name="frontend")
