from collections.abc import Sequence
import logging
from typing import Protocol

from sqlalchemy import Table, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from invoice_migration.db_models import Base
from invoice_migration.errors import StoreError
from invoice_migration.schemas import TargetRecord


logger = logging.getLogger(__name__)


class InvoiceStore(Protocol):
    def count_rows(self, table: str) -> int: ...

    def insert_rows(self, table: str, records: Sequence[TargetRecord]) -> None: ...


class SqlAlchemyInvoiceStore:
    """Invoice store backed by a SQLAlchemy session factory.

    Every call opens its own session, and each insert commits as a single
    transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def count_rows(self, table: str) -> int:
        table_obj = self._table(table)
        stmt = select(func.count()).select_from(table_obj)
        try:
            with self.session_factory() as db:
                return int(db.execute(stmt).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(f"count on '{table}' failed: {exc}") from exc

    def insert_rows(self, table: str, records: Sequence[TargetRecord]) -> None:
        if not records:
            return

        table_obj = self._table(table)
        rows = [record.as_row() for record in records]
        with self.session_factory() as db:
            try:
                db.execute(insert(table_obj), rows)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("insert rolled back", extra={"table": table, "rows": len(rows)})
                raise StoreError(f"insert into '{table}' failed: {exc}") from exc

    def _table(self, table: str) -> Table:
        table_obj = Base.metadata.tables.get(table)
        if table_obj is None:
            raise StoreError(f"unknown table: {table}")
        return table_obj
