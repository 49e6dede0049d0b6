from enrollment_ingest.config.settings import Settings
from enrollment_ingest.database.repositories.enrollment_repository import PostgresEnrollmentStore
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.store.memory_store import InMemoryEnrollmentStore


class EnrollmentStoreFactory:
    """Creates the configured enrollment store."""

    BACKENDS: dict[str, type[BaseEnrollmentStore]] = {
        "postgres": PostgresEnrollmentStore,
        "memory": InMemoryEnrollmentStore,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseEnrollmentStore:
        """Create a store. The postgres backend expects init_pool() to have run."""
        backend = settings.store_backend.lower()
        store_cls = cls.BACKENDS.get(backend)
        if store_cls is None:
            raise ValueError(
                f"Unknown store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return store_cls()

    @classmethod
    def needs_pool(cls, settings: Settings) -> bool:
        return settings.store_backend.lower() == "postgres"
