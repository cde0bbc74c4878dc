from .current_user import CurrentUserDependency, TrustedHeaderCurrentUserDependency

__all__ = [
    "CurrentUserDependency",
    "TrustedHeaderCurrentUserDependency",
]
