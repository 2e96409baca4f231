from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from app.api.v1 import router as api_router
from app.api import deps
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import StorefrontError
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestiona el ciclo de vida de la aplicación.

    Startup: crea las tablas que falten.
    """
    logger.info("Iniciando API de la tienda...")
    init_db()
    logger.info("Aplicación iniciada exitosamente")

    yield

    logger.info("Cerrando API de la tienda...")


app = FastAPI(
    title="Storefront Orders API",
    description="Órdenes, pagos UPI con verificación manual y reseñas",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(api_router.api_router, prefix="/api")


@app.get("/")
def root():
    """
    Root endpoint
    """
    return {"message": "Storefront Orders API", "version": "1.0.0"}


@app.get("/health")
def health_check(db: Session = Depends(deps.get_db)):
    """
    Health check endpoint
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception:
        logger.error("Health check: base de datos no disponible", exc_info=True)
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "database": db_status,
        "upi_configured": bool(settings.UPI_ID),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }
