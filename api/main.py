"""
Supplier relationship management: FastAPI backend.

Thin REST surface over the supplier store. The store owns the cache and the
sync contract with the database; routers only read it and call mutators.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import database
from api.dependencies import get_store
from api.routers import evaluations, imports, non_conformities, reports, suppliers
from persistence.errors import (
    RemoteNotFoundError,
    RemoteReadError,
    RemoteWriteError,
    SupplierHubError,
    ValidationError,
)
from store.app_store import SupplierStore, build_store

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("Starting Supplier Hub API...")
    engine = database.build_engine()
    await database.init_db(engine)
    app.state.store = build_store(database.build_sessionmaker(engine))
    await app.state.store.load_initial_data()
    yield
    logger.info("Shutting down Supplier Hub API...")
    await engine.dispose()


app = FastAPI(
    title="Supplier Hub",
    description="Supplier evaluations, non-conformities and metrics",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(suppliers.router, prefix="/suppliers", tags=["suppliers"])
app.include_router(evaluations.router, prefix="/evaluations", tags=["evaluations"])
app.include_router(non_conformities.router, prefix="/non-conformities", tags=["non-conformities"])
app.include_router(imports.router, prefix="/imports", tags=["imports"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])

# Checked in order; a subclass must come before its base.
_STATUS_BY_ERROR = {
    RemoteNotFoundError: 404,
    ValidationError: 422,
    RemoteWriteError: 409,
    RemoteReadError: 503,
}


@app.exception_handler(SupplierHubError)
async def supplier_hub_error_handler(request: Request, exc: SupplierHubError):
    status_code = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        500,
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.post("/store/refresh")
async def refresh_store(store: SupplierStore = Depends(get_store)):
    """Reload every collection from the database."""
    await store.load_initial_data()
    return {
        "status": "ok",
        "suppliers": len(store.suppliers),
        "evaluations": len(store.evaluations),
        "non_conformities": len(store.non_conformities),
    }


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "ok", "service": "supplier-hub-api"}


@app.get("/")
async def root():
    """Root: API info and links."""
    return {
        "message": "Supplier Hub API",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "suppliers": "/suppliers",
            "evaluations": "/evaluations",
            "non_conformities": "/non-conformities",
            "imports": "/imports",
            "reports": "/reports",
        },
    }
