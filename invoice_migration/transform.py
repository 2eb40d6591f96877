from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
import json
import math
from pathlib import Path
import re
from typing import TypeVar

from invoice_migration.errors import MalformedInputError
from invoice_migration.schemas import SOURCE_LABELS, SourceRecord, TargetRecord


T = TypeVar("T")

DECIMAL_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def load_source_records(input_path: Path) -> list[SourceRecord]:
    if not input_path.exists():
        raise FileNotFoundError(f"dataset file not found: {input_path}")

    with input_path.open("r", encoding="utf-8") as infile:
        payload = json.load(infile)

    if not isinstance(payload, list):
        raise MalformedInputError(
            f"dataset must be a JSON array, got {type(payload).__name__}",
            value=type(payload).__name__,
        )

    records: list[SourceRecord] = []
    for index, raw in enumerate(payload):
        try:
            records.append(SourceRecord.from_json(raw))
        except MalformedInputError as exc:
            raise exc.with_record_index(index) from exc
    return records


def parse_amount(value: str | None, *, label: str) -> float:
    """Parse a decimal amount; empty or missing text counts as zero."""
    if value is None or not value.strip():
        return 0.0

    text = value.strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        raise MalformedInputError(f"{label!r} is not a number: {value!r}", label=label, value=value)

    amount = float(text)
    # Exponents past the float range overflow to infinity.
    if not math.isfinite(amount):
        raise MalformedInputError(f"{label!r} is not a finite number: {value!r}", label=label, value=value)
    return amount


def parse_invoice_date(value: str | None, *, label: str) -> datetime:
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Date-only values resolve to midnight UTC. Naive datetimes are read as UTC
    and offset-aware ones are converted to UTC.
    """
    if value is None or not value.strip():
        raise MalformedInputError(f"{label!r} is required", label=label, value=value)

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise MalformedInputError(f"{label!r} is not an ISO-8601 date: {value!r}", label=label, value=value) from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_target_record(source: SourceRecord) -> TargetRecord:
    return TargetRecord(
        client=source.client,
        invoice_no=source.invoice_no,
        invoice_date=parse_invoice_date(source.invoice_date, label=SOURCE_LABELS["invoice_date"]),
        client_trn=source.client_trn or "",
        description=source.description,
        invoice_subtotal=parse_amount(source.invoice_subtotal, label=SOURCE_LABELS["invoice_subtotal"]),
        rebate=parse_amount(source.rebate, label=SOURCE_LABELS["rebate"]),
        invoice_subtotal_after_rebate=parse_amount(
            source.invoice_subtotal_after_rebate,
            label=SOURCE_LABELS["invoice_subtotal_after_rebate"],
        ),
        vat_amount=parse_amount(source.vat_amount, label=SOURCE_LABELS["vat_amount"]),
        total_invoice_amount=parse_amount(source.total_invoice_amount, label=SOURCE_LABELS["total_invoice_amount"]),
        sales_person=source.sales_person,
        year=source.year,
    )


def transform_records(sources: Sequence[SourceRecord]) -> list[TargetRecord]:
    transformed: list[TargetRecord] = []
    for index, source in enumerate(sources):
        try:
            transformed.append(to_target_record(source))
        except MalformedInputError as exc:
            raise exc.with_record_index(index) from exc
    return transformed


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError(f"batch size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]
