# caja/main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from caja.config.settings import settings
from caja.config.database import Base, engine
from caja.core.exceptions import register_exception_handlers
from caja.core.middleware import setup_middleware
from caja.api.v1.router import api_router
from caja.shared.database import models  # noqa: F401 registra las tablas

logger = logging.getLogger(__name__)

def configure_logging():
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.app_name} iniciando - versión {settings.version}")
    logger.info(f"Entorno: {'Development' if settings.debug else 'Production'}")

    yield

    # Shutdown
    engine.dispose()
    logger.info(f"{settings.app_name} detenida")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Caja registradora: sesiones de caja, carrito y registro de ventas",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

setup_middleware(app)
register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")

@app.get("/")
def root():
    return {
        "message": f"{settings.app_name}",
        "version": settings.version,
        "status": "running",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "api": "/api/v1"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "caja.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
