# caja/config/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .settings import settings

# Base class for models
Base = declarative_base()

def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Crear engine. En SQLite cada transacción parte con BEGIN IMMEDIATE
    para tomar el bloqueo de escritura al inicio (commit y cierre serializados).
    """
    if not database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=300,
            echo=echo
        )

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": settings.sqlite_busy_timeout},
        pool_pre_ping=True,
        echo=echo
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):
        # SQLAlchemy emite el BEGIN, no el driver
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL;")
            cur.execute(f"PRAGMA busy_timeout={settings.sqlite_busy_timeout * 1000};")
            cur.execute("PRAGMA foreign_keys=ON;")
        finally:
            cur.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine

# Create engine
engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

# Database dependency
def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
