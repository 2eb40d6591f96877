from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from invoice_migration.db_models import Base, Invoice


def build_engine(database_url: str) -> Engine:
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(database_url: str) -> sessionmaker[Session]:
    """Session factory for the invoice store; creates the invoices table if absent."""
    engine = build_engine(database_url)
    Base.metadata.create_all(engine, tables=[Invoice.__table__])
    # Store calls never touch ORM instances after commit.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
