from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from .config import settings
from .exceptions import ConnectivityError
import logging

logger = logging.getLogger(__name__)

SCHOOL_TABLES = ("students", "courses", "enrollments")


# =============================================================================
# DATABASE ENGINE CONFIGURATION
# =============================================================================

def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create a database engine for the given URL.

    Server databases get a connection pool sized from settings. SQLite
    connections get foreign key enforcement switched on, otherwise the
    cascade and referential rules of the schema are silently ignored.
    Extra keyword arguments are passed through to create_engine().
    """
    options = {"echo": settings.DB_ECHO_SQL}

    if not database_url.startswith("sqlite"):
        options.update(
            poolclass=QueuePool,
            pool_size=settings.DB_POOL_SIZE,  # Number of connections to keep open
            max_overflow=settings.DB_MAX_OVERFLOW,  # Max connections beyond pool_size
            pool_timeout=settings.DB_POOL_TIMEOUT,  # Seconds to wait for connection
            pool_recycle=settings.DB_POOL_RECYCLE,  # Recycle connections after N seconds
            pool_pre_ping=True,  # Test connection before using (detect disconnects)
            connect_args={"connect_timeout": 10},
        )
    options.update(kwargs)

    new_engine = create_engine(database_url, **options)

    if new_engine.dialect.name == "sqlite":
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            if settings.DEBUG:
                logger.debug("New SQLite connection established (foreign keys on)")

    return new_engine


engine = build_engine(settings.DATABASE_URL)


# =============================================================================
# SESSION CONFIGURATION
# =============================================================================

SessionLocal = sessionmaker(
    autocommit=False,  # Changes are written only by an explicit commit
    autoflush=False,   # Queries never flush staged changes on their own
    bind=engine,
    expire_on_commit=False  # Keep loaded values readable after commit
)

# Create Base class for models
Base = declarative_base()


# =============================================================================
# SCHEMA LIFECYCLE
# =============================================================================

def ensure_created(bind: Engine = None) -> bool:
    """
    Create the school tables and insert the seed rows, once.

    If any of the school tables already exists nothing is touched and
    False is returned. Otherwise tables and seed rows are written in a
    single transaction and True is returned.
    """
    # Models must be imported so Base.metadata knows every table
    from school.core.seed import seed_database
    from school.models import course, enrollment, student  # noqa: F401

    bind = bind or engine
    try:
        with bind.begin() as connection:
            inspector = inspect(connection)
            existing = [name for name in SCHOOL_TABLES if inspector.has_table(name)]
            if existing:
                logger.info(f"Database already exists (found tables: {', '.join(existing)}).")
                return False

            logger.info("Creating database tables...")
            Base.metadata.create_all(bind=connection)
            seed_database(connection)
    except OperationalError as e:
        logger.error(f"❌ Database creation failed: {e}")
        raise ConnectivityError(f"Cannot create database schema: {e.orig}") from e

    logger.info("✅ Database created and seeded successfully!")
    return True


def ensure_deleted(bind: Engine = None) -> bool:
    """
    Drop the school tables.

    ⚠️ DANGER: This will delete all data!
    Returns False when there was nothing to drop.
    """
    from school.models import course, enrollment, student  # noqa: F401

    bind = bind or engine
    try:
        with bind.begin() as connection:
            inspector = inspect(connection)
            if not any(inspector.has_table(name) for name in SCHOOL_TABLES):
                return False
            logger.warning("⚠️ Dropping all school tables...")
            Base.metadata.drop_all(bind=connection)
    except OperationalError as e:
        raise ConnectivityError(f"Cannot drop database schema: {e.orig}") from e

    logger.info("✅ Database tables dropped!")
    return True


def check_database_connection(bind: Engine = None) -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection successful, False otherwise
    """
    bind = bind or engine
    try:
        with bind.connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("✅ Database connection successful!")
        return True
    except OperationalError as e:
        logger.error(f"❌ Database connection failed: {e}")
        return False


def init_db(bind: Engine = None) -> bool:
    """
    Initialize database.
    Run this when starting the application.
    """
    logger.info("Initializing database...")

    if not check_database_connection(bind):
        raise ConnectivityError("Cannot connect to database!")

    return ensure_created(bind)
