"""SQLAlchemy engine and session setup for the SQL key-value backend."""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from logger import log_warning

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create an engine for the configured database URL."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions may be opened from whichever thread performs the write
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args, future=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to the engine."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine):
    """Create tables if they do not exist."""
    # Import models so they register with Base.metadata
    import db_models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def check_db_connection(engine: Engine) -> bool:
    """Check that the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        log_warning(f"Database connection check failed: {e}")
        return False
