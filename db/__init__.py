# db/__init__.py
import logging

from fastapi import Request

logger = logging.getLogger(__name__)


def create_store(settings):
    """Build the store named by settings.storage_backend."""
    backend = settings.storage_backend
    if backend == "memory":
        from .memory import InMemoryStore

        logger.warning("[STORE] Using the in-memory backend. Data will not be saved permanently.")
        return InMemoryStore()

    url = settings.resolved_database_url()
    if backend == "document":
        from .mongo import DocumentStore

        store = DocumentStore.from_url(url)
    elif backend == "relational":
        from .relational import RelationalStore

        store = RelationalStore(url)
    else:
        raise ValueError(f"unknown storage backend: {backend}")
    logger.info("[STORE] Using the %s backend", backend)
    return store


def get_store(request: Request):
    """FastAPI dependency: the store owned by the running application."""
    return request.app.state.store
