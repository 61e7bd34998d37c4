"""Database configuration and initialization.

The store is selected by URL: an embedded SQLite file (desktop mode and
tests) or a networked PostgreSQL server. Services only ever see the
scoped session, so the sale writer and CRUD layer are backend agnostic.
"""
import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    """Enforce foreign keys and use WAL journaling on every SQLite connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def build_engine(database_uri: str, echo: bool = False):
    """Create an engine for either backend."""
    url = make_url(database_uri)

    if url.get_backend_name() == 'sqlite':
        engine_kwargs = {'connect_args': {'check_same_thread': False}}
        if not url.database or url.database == ':memory:':
            # In-memory store must be shared by every session in the process
            engine_kwargs['poolclass'] = StaticPool
        sqlite_engine = create_engine(database_uri, echo=echo, **engine_kwargs)
        event.listen(sqlite_engine, 'connect', _enable_sqlite_pragmas)
        return sqlite_engine

    return create_engine(
        database_uri,
        echo=echo,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20
    )


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = build_engine(database_uri, echo=app.config.get('SQLALCHEMY_ECHO', False))

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    if app.config.get('AUTO_CREATE_SCHEMA', True):
        create_schema()

    logger.info(f"[DB] Store ready: {engine.url.render_as_string(hide_password=True)}")

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_schema():
    """Create all tables that do not exist yet."""
    # Models must be registered on Base.metadata before create_all
    from saga_inventory import models  # noqa: F401
    Base.metadata.create_all(engine)


def drop_schema():
    """Drop all tables."""
    from saga_inventory import models  # noqa: F401
    Base.metadata.drop_all(engine)


def check_connection() -> bool:
    """Return True when the store answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text('SELECT 1'))
        return True
    except Exception as e:
        logger.warning(f"[DB] Health check failed: {e}")
        return False


def get_session():
    """Get database session."""
    return db_session
