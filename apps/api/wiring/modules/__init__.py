from .two_factor import TwoFactorApiModule, build_two_factor_api_module

__all__ = [
    "TwoFactorApiModule",
    "build_two_factor_api_module",
]
