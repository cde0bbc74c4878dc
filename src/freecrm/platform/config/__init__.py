from .two_factor_runtime_config import TwoFactorRuntimeConfig, load_two_factor_runtime_config

__all__ = [
    "TwoFactorRuntimeConfig",
    "load_two_factor_runtime_config",
]
