# process_diagram_core/config.py
from dataclasses import dataclass, field
from functools import lru_cache
import os

from dotenv import load_dotenv

"""
process_diagram_core.config
===========================

Gestión centralizada de configuración de la aplicación.

Este módulo define:
- La estructura de configuración (`Settings`)
- El mecanismo para cargar variables desde entorno (.env)
- Un acceso único y cacheado a la configuración (`get_settings`)

Convenciones
------------
- Las variables de entorno se cargan desde un archivo `.env` si existe.
- Los defaults están pensados para desarrollo local.
- En producción, los valores deben venir del entorno real (Docker, CI, etc.).

Notas importantes
-----------------
- `load_dotenv()` se ejecuta al importar el módulo.
- `DATABASE_URL` la lee `db.database` directamente al importarse, igual que
  siempre; acá se expone solo para diagnóstico.
"""

# Cargar variables de entorno desde .env (si existe)
load_dotenv()


@dataclass
class Settings:
    """
    Contenedor tipado de configuración global de la aplicación.

    Attributes
    ----------
    database_url:
        URL SQLAlchemy de la base de datos.
    history_capacity:
        Cantidad máxima de snapshots que guarda el historial de deshacer/rehacer
        de una sesión de edición. Al superarla se descarta el más antiguo.
    jwt_secret:
        Clave para verificar la firma de los tokens Bearer. Si está vacía, el
        token se decodifica sin verificar firma (la validación real la hace el
        proveedor de identidad en el frontend).
    jwt_algorithm:
        Algoritmo de firma esperado (default HS256).
    cors_origins:
        Orígenes permitidos para CORS.
    environment:
        Nombre del ambiente ("local", "staging", "production").
    log_level:
        Nivel de logging de la API.
    """

    database_url: str
    history_capacity: int = 50

    # Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"

    # API
    cors_origins: list[str] = field(default_factory=list)
    environment: str = "local"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Devuelve una instancia única y cacheada de `Settings`.

    Variables de entorno utilizadas
    -------------------------------
    - DATABASE_URL (default: "sqlite:///data/process_diagram.sqlite")
    - HISTORY_CAPACITY (default: 50)
    - JWT_SECRET (default: "")
    - JWT_ALGORITHM (default: "HS256")
    - CORS_ORIGINS (default: "http://localhost:3000,http://localhost:3001")
    - ENVIRONMENT (default: "local")
    - LOG_LEVEL (default: "INFO")
    """
    cors_origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/process_diagram.sqlite"),
        history_capacity=int(os.getenv("HISTORY_CAPACITY", "50")),
        jwt_secret=os.getenv("JWT_SECRET", ""),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        cors_origins=[origin.strip() for origin in cors_origins_str.split(",") if origin.strip()],
        environment=os.getenv("ENVIRONMENT", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
