import logging
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from emargement.core import config


logger = logging.getLogger(__name__)


def build_connect_args(database_url: str, timeout_seconds: int) -> dict:
    """Driver-level timeouts so a hung store call cannot block a request forever."""
    backend = make_url(database_url).get_backend_name()

    if backend == "sqlite":
        return {"timeout": timeout_seconds, "check_same_thread": False}
    if backend == "mysql":
        return {
            "connect_timeout": timeout_seconds,
            "read_timeout": timeout_seconds,
            "write_timeout": timeout_seconds,
        }
    if backend == "postgresql":
        return {
            "connect_timeout": timeout_seconds,
            "options": f"-c statement_timeout={timeout_seconds * 1000}",
        }
    return {}


def create_store_engine(database_url: str, timeout_seconds: int = config.DB_TIMEOUT_SECONDS, **overrides):
    engine_kwargs = {"connect_args": build_connect_args(database_url, timeout_seconds)}
    if make_url(database_url).get_backend_name() != "sqlite":
        engine_kwargs["pool_timeout"] = timeout_seconds
        engine_kwargs["pool_pre_ping"] = True
    engine_kwargs.update(overrides)

    store_engine = create_engine(database_url, **engine_kwargs)

    if store_engine.dialect.name == "sqlite":
        @event.listens_for(store_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return store_engine


engine = create_store_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_attendance_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_attendance_schema(bind=None) -> None:
    """Add the one-record-per-trainee unique index to an emargements table created before it existed."""
    global _attendance_schema_checked

    if _attendance_schema_checked and bind is None:
        return

    target = bind if bind is not None else engine

    with _schema_lock:
        if _attendance_schema_checked and bind is None:
            return

        inspector = inspect(target)

        if 'emargements' not in inspector.get_table_names():
            _attendance_schema_checked = True
            return

        existing_indexes = {index['name'] for index in inspector.get_indexes('emargements')}
        existing_indexes.update(
            constraint['name'] for constraint in inspector.get_unique_constraints('emargements')
        )

        if 'uq_emargements_session_etudiant' not in existing_indexes:
            logger.info('Adding unique index on emargements(session_id, etudiant_id).')
            with target.begin() as connection:
                connection.execute(
                    text(
                        'CREATE UNIQUE INDEX uq_emargements_session_etudiant '
                        'ON emargements(session_id, etudiant_id)'
                    )
                )

        _attendance_schema_checked = True
