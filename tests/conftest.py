from collections.abc import Callable, Sequence
from dataclasses import fields, replace
import json
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker

from invoice_migration.config import Settings
from invoice_migration.database import build_session_factory
from invoice_migration.errors import StoreError
from invoice_migration.schemas import SOURCE_LABELS, SourceRecord, TargetRecord
from invoice_migration.store import SqlAlchemyInvoiceStore


BASE_SOURCE = SourceRecord(
    client="Al Noor Trading LLC",
    invoice_no="INV-2023-0001",
    invoice_date="2023-01-15",
    client_trn="100234567800003",
    description="Monthly maintenance contract",
    invoice_subtotal="4000.00",
    rebate="",
    invoice_subtotal_after_rebate="4000.00",
    vat_amount="200.00",
    total_invoice_amount="4200.00",
    sales_person="Mariam",
    year="2023",
)


def _dataset_entry(record: SourceRecord) -> dict[str, str]:
    return {
        SOURCE_LABELS[field.name]: getattr(record, field.name)
        for field in fields(record)
        if getattr(record, field.name) is not None
    }


class RecordingStore:
    """In-memory store double that records every call in order."""

    def __init__(self, *, existing: int = 0, fail_on_insert: int | None = None, fail_count: bool = False) -> None:
        self.existing = existing
        self.fail_on_insert = fail_on_insert
        self.fail_count = fail_count
        self.calls: list[str] = []
        self.inserted_batches: list[list[TargetRecord]] = []

    def count_rows(self, table: str) -> int:
        self.calls.append(f"count:{table}")
        if self.fail_count:
            raise StoreError("connection refused")
        return self.existing + sum(len(batch) for batch in self.inserted_batches)

    def insert_rows(self, table: str, records: Sequence[TargetRecord]) -> None:
        self.calls.append(f"insert:{table}:{len(records)}")
        if self.fail_on_insert is not None and len(self.calls_of("insert")) == self.fail_on_insert:
            raise StoreError("statement timeout")
        self.inserted_batches.append(list(records))

    def calls_of(self, kind: str) -> list[str]:
        return [call for call in self.calls if call.startswith(f"{kind}:")]


@pytest.fixture()
def make_source() -> Callable[..., SourceRecord]:
    def _make(index: int = 0, **overrides: str | None) -> SourceRecord:
        record = replace(BASE_SOURCE, invoice_no=f"INV-{index:05d}")
        return replace(record, **overrides)

    return _make


@pytest.fixture()
def write_dataset(tmp_path: Path) -> Callable[[list[SourceRecord]], Path]:
    def _write(records: list[SourceRecord]) -> Path:
        path = tmp_path / "data" / "invoices.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps([_dataset_entry(record) for record in records]), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        app_name="invoice-migration",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_level="INFO",
        dataset_path=str(tmp_path / "data" / "invoices.json"),
        table_name="invoices",
        batch_size=100,
    )


@pytest.fixture()
def session_factory(test_settings: Settings) -> sessionmaker[Session]:
    return build_session_factory(test_settings.database_url)


@pytest.fixture()
def sql_store(session_factory: sessionmaker[Session]) -> SqlAlchemyInvoiceStore:
    return SqlAlchemyInvoiceStore(session_factory)


@pytest.fixture()
def recording_store() -> type[RecordingStore]:
    return RecordingStore
