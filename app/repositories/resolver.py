import logging
from typing import Optional

from app.core.settings import settings
from .base import IssueRepository
from .json_repository import JsonFileRepository
from .memory_repository import InMemoryRepository

logger = logging.getLogger(__name__)

_repository_instance: Optional[IssueRepository] = None


def build_repository(backend: Optional[str] = None) -> IssueRepository:
    """
    Build a repository for the named backend (defaults to STORAGE_BACKEND).

    Rules:
    - "json" (default): local JSON file at DATA_FILE_PATH
    - "firestore": Firestore collections via firebase_admin
    - "memory": process-local, nothing survives a restart
    Unknown backends raise ValueError.
    """
    name = (backend or settings.STORAGE_BACKEND or "json").lower()

    if name == "json":
        return JsonFileRepository(settings.DATA_FILE_PATH)
    if name == "firestore":
        from .firestore_repository import FirestoreRepository
        return FirestoreRepository()
    if name == "memory":
        logger.warning("Using in-memory storage; data will be lost on restart")
        return InMemoryRepository()

    raise ValueError(f"Unknown STORAGE_BACKEND '{name}'. Expected json, firestore or memory.")


def get_repository() -> IssueRepository:
    """Resolve (and cache) the configured repository."""
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = build_repository()
        logger.info(f"Storage backend initialized: {_repository_instance.name}")
    return _repository_instance
