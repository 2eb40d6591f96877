"""Invoice migration exception hierarchy."""


class MigrationError(Exception):
    """Base exception for all migration failures."""


class StoreError(MigrationError):
    """Raised when the backing store rejects a count or insert."""


class PrecheckError(MigrationError):
    """Raised when the existing-row count cannot be read."""


class BatchInsertError(MigrationError):
    """Raised when one batch fails to write; earlier batches stay committed."""

    def __init__(self, message: str, *, batch_index: int, inserted_count: int) -> None:
        super().__init__(message)
        self.batch_index = batch_index
        self.inserted_count = inserted_count


class MalformedInputError(MigrationError, ValueError):
    """Raised when a source value cannot be coerced to its target type."""

    def __init__(
        self,
        message: str,
        *,
        label: str | None = None,
        value: object = None,
        record_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.label = label
        self.value = value
        self.record_index = record_index

    def with_record_index(self, record_index: int) -> "MalformedInputError":
        return MalformedInputError(
            f"record {record_index}: {self}",
            label=self.label,
            value=self.value,
            record_index=record_index,
        )
