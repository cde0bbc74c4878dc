from .api import TrustedHeaderCurrentUserDependency, build_two_factor_router

__all__ = [
    "TrustedHeaderCurrentUserDependency",
    "build_two_factor_router",
]
