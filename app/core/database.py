from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings

# SQLite necesita check_same_thread=False para usarse desde el threadpool de FastAPI
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

# Crear el motor de la base de datos
engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,  # Mostrar consultas SQL
    pool_pre_ping=True,      # Verificar conexiones antes de usarlas
    connect_args=connect_args,
)


def create_db_and_tables():
    """Crear todas las tablas en la base de datos"""
    # Registrar las tablas en el metadata antes de crearlas
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Generador de sesiones de base de datos"""
    with Session(engine) as session:
        yield session
