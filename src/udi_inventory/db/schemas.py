"""SQLAlchemy ORM models for UDI Inventory."""

from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Index, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class InventoryRecord(Base):
    """A counted inventory item at a location."""

    __tablename__ = "inventory_records"

    record_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    added_at: Mapped[datetime] = mapped_column(default=_utc_now)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[str] = mapped_column(Text, nullable=False, default="")
    lot: Mapped[str] = mapped_column(Text, nullable=False, default="")
    serial: Mapped[str | None] = mapped_column(Text, nullable=True)
    expiration_date: Mapped[date] = mapped_column(nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hospital: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(Text, nullable=True)
    floor: Mapped[str | None] = mapped_column(Text, nullable=True)
    area: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(nullable=False, default=1)
    is_synced: Mapped[bool] = mapped_column(default=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_quantity_positive"),
        Index("idx_inventory_records_added_at", "added_at"),
        Index("idx_inventory_records_expiration", "expiration_date"),
    )
