"""Inventory service turning scans into records and summarizing expirations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from uuid import UUID

import structlog

from udi_inventory.api.barcode_parser import parse_identifier
from udi_inventory.config import get_settings
from udi_inventory.core.expiration import (
    ExpirationThresholds,
    classify_expiration,
    count_by_tier,
    expiry_warnings,
    partition_by_tier,
    sort_by_recency,
)
from udi_inventory.core.models import (
    ExpirationTier,
    LocationContext,
    RecordDraft,
    ScanMode,
    ScanReview,
)
from udi_inventory.db.memory import InMemoryRecordStore
from udi_inventory.db.postgres import PostgresRecordStore
from udi_inventory.db.schemas import InventoryRecord
from udi_inventory.db.store import RecordStore

logger = structlog.get_logger()


class DraftValidationError(ValueError):
    """Raised when a draft is missing data required to store it."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


@dataclass
class InventorySummary:
    """Dashboard figures for the current inventory."""

    active_items: int
    tier_counts: dict[ExpirationTier, int]
    recent_items: list[InventoryRecord] = field(default_factory=list)


def validate_draft(draft: RecordDraft) -> None:
    """Check that a draft can be handed to the record store.

    Raises:
        DraftValidationError: Listing every problem found
    """
    problems = []
    if not draft.name.strip():
        problems.append("Name is required.")
    if not draft.expiration_date:
        problems.append("Expiration date is required.")
    else:
        try:
            date.fromisoformat(draft.expiration_date)
        except ValueError:
            problems.append(f"Expiration date is not a valid date: {draft.expiration_date}")
    if draft.quantity < 1:
        problems.append(f"Quantity must be positive, got: {draft.quantity}")

    if problems:
        raise DraftValidationError(problems)


class InventoryService:
    """Business logic for inventory operations."""

    def __init__(self, store: RecordStore):
        """Initialize inventory service.

        Args:
            store: Record store to read and write records
        """
        self.store = store
        settings = get_settings()
        self._settings = settings.inventory
        self._expiration = settings.expiration

    @property
    def thresholds(self) -> ExpirationThresholds:
        """Configured expiration tier thresholds."""
        return self._expiration.thresholds

    def review_scan(
        self,
        raw_scan: str,
        location: LocationContext | None = None,
        quantity: int | None = None,
        now: datetime | None = None,
    ) -> ScanReview:
        """Prepare a draft from a barcode scan.

        Args:
            raw_scan: Raw string delivered by the scanner
            location: Where the count is taking place
            quantity: Units counted. Defaults to the configured default.
            now: Reference time for expiry warnings

        Returns:
            ScanReview with the draft, missing data flag and warnings
        """
        parsed = parse_identifier(raw_scan)

        draft = RecordDraft(
            product_id=parsed.product_id or raw_scan,
            lot=parsed.lot or "",
            serial=parsed.serial,
            expiration_date=parsed.expiration_date or "",
            quantity=quantity if quantity is not None else self._settings.default_quantity,
        )
        draft.apply_location(location)

        review = ScanReview(
            draft=draft,
            mode=ScanMode.BARCODE,
            missing_data=not parsed.expiration_date or not parsed.lot,
            warnings=expiry_warnings(
                draft.expiration_date, now, self._expiration.soon_warning_days
            ),
        )

        logger.info(
            "scan_reviewed",
            product_id=draft.product_id,
            lot=draft.lot,
            expiration_date=draft.expiration_date,
            missing_data=review.missing_data,
        )
        return review

    def review_count(
        self, quantity: int, location: LocationContext | None = None
    ) -> ScanReview:
        """Prepare a draft from a direct quantity count.

        Counting mode carries no identifier, so every identifying field
        is left for the user to fill in.
        """
        draft = RecordDraft(quantity=quantity)
        draft.apply_location(location)

        logger.info("count_reviewed", quantity=quantity)
        return ScanReview(draft=draft, mode=ScanMode.COUNTING, missing_data=True)

    def add_record(self, draft: RecordDraft) -> UUID:
        """Validate a draft and store it.

        Raises:
            DraftValidationError: If the draft is incomplete
            RecordStoreError: If the store rejects the record
        """
        try:
            validate_draft(draft)
        except DraftValidationError as e:
            logger.warning("draft_rejected", problems=e.problems)
            raise

        record_id = self.store.add(draft)
        logger.info("inventory_record_created", record_id=str(record_id), name=draft.name)
        return record_id

    def remove_record(self, record_id: UUID) -> None:
        """Delete a record from the store."""
        self.store.remove(record_id)

    def list_records(self) -> list[InventoryRecord]:
        """Get all records, most recently added first."""
        return sort_by_recency(self.store.list_records())

    def get_record(self, record_id: UUID) -> InventoryRecord:
        """Get a single record by id.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        return self.store.get(record_id)

    def classify(self, record: InventoryRecord, now: datetime | None = None) -> ExpirationTier:
        """Classify a single record with the configured thresholds."""
        return classify_expiration(record.expiration_date, now, self.thresholds)

    def search(
        self,
        query: str = "",
        tier: ExpirationTier | None = None,
        now: datetime | None = None,
    ) -> list[InventoryRecord]:
        """Filter records for the inventory list, most recently added first.

        Args:
            query: Case-insensitive match on name or location, or a
                substring of the product id. Empty matches everything.
            tier: Keep only records in this tier. None keeps all tiers.
            now: Reference time for the tier filter

        Returns:
            Matching records in list order
        """
        if now is None:
            now = datetime.now(timezone.utc)
        needle = query.lower()

        matches = []
        for record in self.list_records():
            if not (
                needle in record.name.lower()
                or query in record.product_id
                or needle in record.location.lower()
            ):
                continue
            if tier is not None and self.classify(record, now) != tier:
                continue
            matches.append(record)

        logger.debug("records_searched", query=query, tier=tier, matches=len(matches))
        return matches

    def summarize(self, now: datetime | None = None) -> InventorySummary:
        """Get dashboard figures: totals, tier counts and recent additions."""
        if now is None:
            now = datetime.now(timezone.utc)
        records = self.store.list_records()

        return InventorySummary(
            active_items=len(records),
            tier_counts=count_by_tier(records, now, self.thresholds),
            recent_items=sort_by_recency(records)[: self._settings.recent_items_limit],
        )

    def overview(
        self, now: datetime | None = None
    ) -> dict[ExpirationTier, list[InventoryRecord]]:
        """Get records bucketed by tier, worst first."""
        if now is None:
            now = datetime.now(timezone.utc)
        return partition_by_tier(self.store.list_records(), now, self.thresholds)


# Global service instance
_service: InventoryService | None = None


def create_store(offline_mode: bool | None = None) -> RecordStore:
    """Create the record store for the given mode.

    Args:
        offline_mode: Keep records in memory. If None, uses configured settings.
    """
    settings = get_settings()
    if offline_mode is None:
        offline_mode = settings.inventory.offline_mode

    if offline_mode:
        logger.info("record_store_selected", store="memory", reason="offline_mode")
        return InMemoryRecordStore()
    if not settings.database.is_configured:
        logger.warning("database_not_configured_using_memory_store")
        return InMemoryRecordStore()

    logger.info("record_store_selected", store="postgres", host=settings.database.host)
    return PostgresRecordStore(settings.database.conninfo)


def get_service() -> InventoryService:
    """Get the global inventory service instance."""
    global _service
    if _service is None:
        _service = InventoryService(create_store())
    return _service
