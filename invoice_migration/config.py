from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    log_level: str
    dataset_path: str
    table_name: str
    batch_size: int


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "invoice-migration"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./invoices.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        dataset_path=os.getenv("DATASET_PATH", "./data/invoices.json"),
        table_name=os.getenv("INVOICE_TABLE", "invoices"),
        batch_size=_int_env("BATCH_SIZE", "100"),
    )
