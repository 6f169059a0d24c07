from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from .config import settings

# Custom execution option: start the transaction holding the SQLite write lock
SQLITE_IMMEDIATE = "kitrent_immediate"


def create_db_engine(url: str, busy_timeout: float | None = None) -> Engine:
    """
    Build an engine for `url`.

    SQLite engines get foreign keys switched on and explicit BEGIN handling,
    so a session can ask for BEGIN IMMEDIATE and serialize against other writers.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    if busy_timeout is None:
        busy_timeout = settings.sqlite_busy_timeout

    # check_same_thread=False: FastAPI runs sync endpoints in a thread pool
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        # pysqlite would otherwise defer BEGIN until the first write
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def sqlite_begin(conn):
        if conn.get_execution_options().get(SQLITE_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def begin_serialized(db: Session) -> None:
    """
    Open the session transaction with writer isolation.

    SQLite: BEGIN IMMEDIATE (one writer at a time, others wait busy_timeout).
    Other backends: SERIALIZABLE isolation level.
    The session must not already be inside a transaction.
    """
    if db.get_bind().dialect.name == "sqlite":
        options = {SQLITE_IMMEDIATE: True}
    else:
        options = {"isolation_level": "SERIALIZABLE"}
    db.connection(execution_options=options)


engine = create_db_engine(settings.resolved_database_url)

# SessionLocal: фабрика сессий
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Dependency для FastAPI (одна сессия на запрос)
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
