"""FastAPI dependencies."""

from fastapi import HTTPException, Request

from store.app_store import SupplierStore


def get_store(request: Request) -> SupplierStore:
    """The process-wide store attached to the app at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Store not initialized")
    return store
