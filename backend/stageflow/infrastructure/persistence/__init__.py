from .in_memory_repository import InMemorySchedulingRepository

__all__ = ["InMemorySchedulingRepository"]
