from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()

# Largest value a 64-bit signed INTEGER column can hold
MAX_INTEGER = 2 ** 63 - 1


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """
    Build the engine for the given URL.

    SQLite connections are shared with FastAPI's thread pool, so the
    same-thread check is disabled and writers wait on the file lock
    instead of failing immediately. SQLite only enforces foreign keys when
    each connection turns them on.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, connect_args=connect_args)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(database_url: str):
    """
    Inicializa la base de datos:
    - Crea el engine y la fábrica de sesiones
    - Crea todas las tablas

    Returns:
        Tupla (engine, session_factory) para inyectar en la aplicación
    """
    # Registrar los modelos en Base.metadata
    from agromarket import models  # noqa: F401

    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    logger.info("Tablas de base de datos creadas")

    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory


def dispose_db(engine: Engine) -> None:
    engine.dispose()
    logger.info("Conexiones de base de datos cerradas")
