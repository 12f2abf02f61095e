from .interface import TaskStore
from .memory_store import InMemoryTaskStore
from .redis_store import RedisTaskStore

__all__ = ["TaskStore", "InMemoryTaskStore", "RedisTaskStore"]
