from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite solo se usa en desarrollo local; FastAPI sirve endpoints síncronos en varios hilos
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """
    Inicializa la base de datos creando todas las tablas registradas.
    """
    # Registrar modelos en el metadata antes de crear tablas
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Tablas de base de datos creadas")
