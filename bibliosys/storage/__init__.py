from .base import Store, Transaction, seed_initial_data
from .jsonfile import JsonFileStore
from .sqlite import SQLiteStore

BACKENDS = {
    SQLiteStore.name: lambda config: SQLiteStore(config["DATABASE"]),
    JsonFileStore.name: lambda config: JsonFileStore(config["DATA_FILE"]),
}


def create_store(config) -> Store:
    backend = config.get("STORAGE_BACKEND", SQLiteStore.name)
    try:
        factory = BACKENDS[backend]
    except KeyError:
        raise ValueError(f"unknown STORAGE_BACKEND {backend!r}") from None
    return factory(config)


__all__ = [
    "Store",
    "Transaction",
    "SQLiteStore",
    "JsonFileStore",
    "create_store",
    "seed_initial_data",
]
