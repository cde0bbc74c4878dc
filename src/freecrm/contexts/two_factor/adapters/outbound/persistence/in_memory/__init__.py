from .two_factor_repository import InMemoryTwoFactorRepository

__all__ = ["InMemoryTwoFactorRepository"]
