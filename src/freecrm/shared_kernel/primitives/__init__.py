"""
Shared Kernel primitives.

    from freecrm.shared_kernel.primitives import UserId
"""

from .user_id import UserId

__all__ = [
    "UserId",
]
