import argparse
import json
import logging
from pathlib import Path
from typing import NoReturn

from invoice_migration.config import get_settings
from invoice_migration.database import build_session_factory
from invoice_migration.errors import MigrationError
from invoice_migration.migrator import Migrator
from invoice_migration.store import SqlAlchemyInvoiceStore
from invoice_migration.transform import load_source_records


logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load the invoice dataset into the database")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="run the one-time invoice migration")
    migrate_parser.add_argument("--dataset", required=False, help="Path to the invoice JSON dataset")
    migrate_parser.add_argument("--batch-size", type=int, required=False, help="Rows per insert call")
    migrate_parser.add_argument("--table", required=False, help="Target table name")

    count_parser = subparsers.add_parser("count", help="print the current row count of the target table")
    count_parser.add_argument("--table", required=False, help="Target table name")

    return parser.parse_args()


def _fail(message: str) -> NoReturn:
    print(f"status=failed skipped=False count=0 message={message}")
    raise SystemExit(1)


def main() -> None:
    args = parse_args()
    try:
        settings = get_settings()
    except ValueError as exc:
        _fail(f"invalid configuration: {exc}")

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    table = args.table or settings.table_name
    store = SqlAlchemyInvoiceStore(build_session_factory(settings.database_url))

    if args.command == "count":
        try:
            print(f"table={table} count={store.count_rows(table)}")
        except MigrationError:
            logger.exception("row count failed", extra={"table": table})
            raise SystemExit(1)
        return

    dataset_path = Path(args.dataset or settings.dataset_path)
    try:
        records = load_source_records(dataset_path)
    except (OSError, json.JSONDecodeError, MigrationError):
        logger.exception("could not load invoice dataset", extra={"dataset": str(dataset_path)})
        _fail(f"could not load dataset {dataset_path}")

    batch_size = args.batch_size if args.batch_size is not None else settings.batch_size
    try:
        migrator = Migrator(store, records, table=table, batch_size=batch_size)
    except ValueError as exc:
        logger.error("invalid batch size", extra={"batch_size": batch_size})
        _fail(str(exc))

    result = migrator.migrate()

    print(
        "status={status} skipped={skipped} count={count} message={message}".format(
            status="succeeded" if result.success else "failed",
            skipped=result.skipped,
            count=result.count,
            message=result.message,
        )
    )
    if not result.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
