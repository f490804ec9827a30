"""PostgreSQL record store for UDI Inventory."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator
from uuid import UUID

import psycopg
import structlog

from udi_inventory.core.models import RecordDraft
from udi_inventory.db.schemas import InventoryRecord
from udi_inventory.db.store import (
    RecordNotFoundError,
    RecordStore,
    RecordStoreError,
    record_from_draft,
)

logger = structlog.get_logger()

_RECORD_COLUMNS = """
    record_id, added_at, name, product_id, lot, serial, expiration_date,
    location, hospital, department, floor, area, quantity, is_synced
"""

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS inventory_records (
    record_id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    added_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    name TEXT NOT NULL,
    product_id TEXT NOT NULL DEFAULT '',
    lot TEXT NOT NULL DEFAULT '',
    serial TEXT,
    expiration_date DATE NOT NULL,
    location TEXT NOT NULL DEFAULT '',
    hospital TEXT,
    department TEXT,
    floor TEXT,
    area TEXT,
    quantity INT NOT NULL CHECK (quantity > 0),
    is_synced BOOLEAN NOT NULL DEFAULT TRUE
);

CREATE INDEX IF NOT EXISTS idx_inventory_records_added_at
    ON inventory_records (added_at DESC);

CREATE INDEX IF NOT EXISTS idx_inventory_records_expiration
    ON inventory_records (expiration_date);
"""


def _record_from_row(row: tuple) -> InventoryRecord:
    return InventoryRecord(
        record_id=row[0],
        added_at=row[1],
        name=row[2],
        product_id=row[3],
        lot=row[4],
        serial=row[5],
        expiration_date=row[6],
        location=row[7],
        hospital=row[8],
        department=row[9],
        floor=row[10],
        area=row[11],
        quantity=row[12],
        is_synced=row[13],
    )


class PostgresRecordStore(RecordStore):
    """Record store backed by the ``inventory_records`` table."""

    def __init__(self, conninfo: str):
        """Initialize the store.

        Args:
            conninfo: psycopg connection string
        """
        super().__init__()
        self._conninfo = conninfo

    @contextmanager
    def session(self) -> Generator[psycopg.Connection, None, None]:
        """Get a database connection context manager."""
        try:
            conn = psycopg.connect(self._conninfo)
        except psycopg.Error as e:
            logger.error("database_connect_failed", error=str(e))
            raise RecordStoreError(f"Could not connect to database: {e}") from e
        try:
            yield conn
            conn.commit()
        except psycopg.Error as e:
            conn.rollback()
            logger.error("database_operation_failed", error=str(e))
            raise RecordStoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            with self.session() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1")
            return True
        except RecordStoreError as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    def create_tables(self) -> None:
        """Create the records table and its indexes if missing."""
        with self.session() as conn:
            with conn.cursor() as cur:
                for statement in CREATE_TABLE_SQL.split(";"):
                    statement = statement.strip()
                    if statement:
                        cur.execute(statement)

    def count(self) -> int:
        """Get the number of stored records."""
        with self.session() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM inventory_records")
                return cur.fetchone()[0]

    def add(self, draft: RecordDraft) -> UUID:
        record = record_from_draft(draft, is_synced=True)
        with self.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO inventory_records ({_RECORD_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        record.record_id,
                        record.added_at,
                        record.name,
                        record.product_id,
                        record.lot,
                        record.serial,
                        record.expiration_date,
                        record.location,
                        record.hospital,
                        record.department,
                        record.floor,
                        record.area,
                        record.quantity,
                        record.is_synced,
                    ),
                )

        logger.info("record_added", record_id=str(record.record_id), store="postgres")
        self._notify()
        return record.record_id

    def remove(self, record_id: UUID) -> None:
        with self.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM inventory_records WHERE record_id = %s",
                    (record_id,),
                )
                deleted = cur.rowcount

        if deleted == 0:
            raise RecordNotFoundError(f"Record not found: {record_id}")

        logger.info("record_removed", record_id=str(record_id), store="postgres")
        self._notify()

    def list_records(self) -> list[InventoryRecord]:
        with self.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM inventory_records
                    ORDER BY added_at DESC
                    """
                )
                rows = cur.fetchall()

        return [_record_from_row(row) for row in rows]

    def get(self, record_id: UUID) -> InventoryRecord:
        with self.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_RECORD_COLUMNS}
                    FROM inventory_records
                    WHERE record_id = %s
                    """,
                    (record_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")
        return _record_from_row(row)
