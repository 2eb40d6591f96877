from collections.abc import Sequence
import logging

from invoice_migration.errors import BatchInsertError, MigrationError, PrecheckError, StoreError
from invoice_migration.schemas import MigrationResult, SourceRecord, TargetRecord
from invoice_migration.store import InvoiceStore
from invoice_migration.transform import chunked, transform_records


logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
DEFAULT_TABLE = "invoices"


class Migrator:
    """One-shot loader of invoice records into an empty store table.

    The row-count check guards against a second run but is not atomic: two
    concurrent runs can both see an empty table.
    """

    def __init__(
        self,
        store: InvoiceStore,
        records: Sequence[SourceRecord],
        *,
        table: str = DEFAULT_TABLE,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch size must be at least 1, got {batch_size}")
        self.store = store
        self.records = tuple(records)
        self.table = table
        self.batch_size = batch_size

    def migrate(self) -> MigrationResult:
        logger.info("starting invoice migration", extra={"table": self.table, "records": len(self.records)})
        inserted = 0
        try:
            existing = self._count_existing()
            if existing > 0:
                logger.info("table already has data, skipping migration", extra={"table": self.table, "count": existing})
                return MigrationResult(success=True, message="Data already migrated", count=existing, skipped=True)

            target_records = transform_records(self.records)
            logger.info("migrating %d invoices", len(target_records))
            inserted = self._write_batches(target_records)
        except BatchInsertError as exc:
            logger.exception("invoice migration failed", extra={"table": self.table, "inserted": exc.inserted_count})
            return MigrationResult(success=False, message=str(exc), count=exc.inserted_count, error=exc)
        except Exception as exc:
            logger.exception("invoice migration failed", extra={"table": self.table})
            message = str(exc) if isinstance(exc, MigrationError) else f"Migration failed: {exc}"
            return MigrationResult(success=False, message=message, count=inserted, error=exc)

        logger.info("invoice migration completed", extra={"table": self.table, "count": inserted})
        return MigrationResult(success=True, message=f"Successfully migrated {inserted} invoices", count=inserted)

    def _count_existing(self) -> int:
        try:
            return self.store.count_rows(self.table)
        except StoreError as exc:
            raise PrecheckError(f"could not count rows in '{self.table}': {exc}") from exc

    def _write_batches(self, target_records: list[TargetRecord]) -> int:
        total = len(target_records)
        inserted = 0
        for batch_index, batch in enumerate(chunked(target_records, self.batch_size)):
            try:
                self.store.insert_rows(self.table, batch)
            except Exception as exc:
                raise BatchInsertError(
                    f"batch {batch_index} failed after {inserted} invoices were inserted: {exc}",
                    batch_index=batch_index,
                    inserted_count=inserted,
                ) from exc
            inserted += len(batch)
            logger.info("migrated %d/%d invoices", inserted, total)
        return inserted
