from .in_memory import InMemoryTwoFactorRepository

__all__ = ["InMemoryTwoFactorRepository"]
