"""
API HTTP principal para process-diagram-core.

Esta aplicación FastAPI expone endpoints REST sobre el motor de diagramas
(process_diagram_core): procesos, versiones, colaboradores y comentarios.

Uso:
    uvicorn api.main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from process_diagram_core.config import get_settings
from process_diagram_core.db.database import init_db
from process_diagram_core.exceptions import ProcessDiagramError

from .routes import catalog, collaborators, comments, process_versions, processes

settings = get_settings()

# Configurar logging según ambiente
log_level = getattr(logging, settings.log_level, logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
logger.info(f"🚀 Iniciando API en ambiente: {settings.environment}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Crea las tablas que falten (SQLite local / tests)
    init_db()
    yield


app = FastAPI(
    title="Process Diagram Core API",
    description="API del editor visual de procesos: diagramas, versiones y colaboración",
    version="0.1.0",
    lifespan=lifespan,
)

logger.info(f"🌐 CORS origins configurados: {settings.cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProcessDiagramError)
async def process_diagram_error_handler(request: Request, exc: ProcessDiagramError):
    """Mapea los errores del motor al mismo formato que HTTPException."""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


# Registrar rutas
app.include_router(processes.router)
app.include_router(process_versions.router)
app.include_router(collaborators.router)
app.include_router(comments.router)
app.include_router(catalog.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "process-diagram-core-api"}


@app.get("/health")
async def health():
    """Health check detallado."""
    return {
        "status": "ok",
        "service": "process-diagram-core-api",
        "version": "0.1.0",
    }
