from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from invoice_migration.errors import MalformedInputError


# Attribute name -> label used as the key in the invoice dataset.
SOURCE_LABELS: dict[str, str] = {
    "client": "CLIENT",
    "invoice_no": "INVOICE NO.",
    "invoice_date": "INVOICE DATE",
    "client_trn": "CLIENT TRN",
    "description": "DESCRIPTION",
    "invoice_subtotal": "INVOICE SUB-TOTAL",
    "rebate": "REBATE",
    "invoice_subtotal_after_rebate": "INVOICE SUB-TOTAL AFTER REBATE",
    "vat_amount": "VAT % AMOUNT",
    "total_invoice_amount": "TOTAL INVOICE AMOUNT",
    "sales_person": "Sales Person",
    "year": "_year",
}


def _text_value(raw: dict[str, Any], label: str) -> str | None:
    value = raw.get(label)
    if value is None or isinstance(value, str):
        return value
    # bool is an int subclass but never a meaningful amount.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise MalformedInputError(
        f"{label!r} must be text, got {type(value).__name__}",
        label=label,
        value=value,
    )


@dataclass(frozen=True)
class SourceRecord:
    client: str | None = None
    invoice_no: str | None = None
    invoice_date: str | None = None
    client_trn: str | None = None
    description: str | None = None
    invoice_subtotal: str | None = None
    rebate: str | None = None
    invoice_subtotal_after_rebate: str | None = None
    vat_amount: str | None = None
    total_invoice_amount: str | None = None
    sales_person: str | None = None
    year: str | None = None

    @classmethod
    def from_json(cls, raw: object) -> "SourceRecord":
        if not isinstance(raw, dict):
            raise MalformedInputError(
                f"invoice entry must be a JSON object, got {type(raw).__name__}",
                value=raw,
            )
        return cls(**{name: _text_value(raw, label) for name, label in SOURCE_LABELS.items()})


@dataclass(frozen=True)
class TargetRecord:
    client: str | None
    invoice_no: str | None
    invoice_date: datetime
    client_trn: str
    description: str | None
    invoice_subtotal: float
    rebate: float
    invoice_subtotal_after_rebate: float
    vat_amount: float
    total_invoice_amount: float
    sales_person: str | None
    year: str | None

    def as_row(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class MigrationResult:
    success: bool
    message: str
    count: int
    error: Exception | None = None
    skipped: bool = False
