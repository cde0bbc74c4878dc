"""
Runtime config loader for the two-factor authentication module.

Docs: docs/architecture/two_factor/two-factor-totp-policy-v1.md
Related: apps.api.wiring.modules.two_factor,
  freecrm.contexts.two_factor.adapters.outbound.security.two_factor.scrypt_aes_secret_cipher
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

log = logging.getLogger(__name__)

_ENV_NAME_KEY = "FREECRM_ENV"
_CONFIG_PATH_KEY = "FREECRM_TWO_FACTOR_CONFIG"
_FAIL_FAST_KEY = "TWO_FACTOR_FAIL_FAST"
_ENCRYPTION_KEY_KEY = "TWO_FACTOR_ENCRYPTION_KEY"
_ISSUER_KEY = "TWO_FACTOR_ISSUER"
_VALID_WINDOW_KEY = "TWO_FACTOR_VALID_WINDOW"
_WARNING_THRESHOLD_KEY = "TWO_FACTOR_BACKUP_CODE_WARNING_THRESHOLD"
_KDF_SALT_KEY = "TWO_FACTOR_KDF_SALT"
_ALLOWED_ENVS = ("dev", "prod", "test")
_SECTION = "two_factor"

_DEFAULT_ISSUER = "Free CRM"
_DEFAULT_VALID_WINDOW = 1
_DEFAULT_WARNING_THRESHOLD = 3
_DEFAULT_KDF_SALT = "salt"
_DEV_ENCRYPTION_KEY = "default-dev-key-change-in-production"
_MAX_WARNING_THRESHOLD = 10


@dataclass(frozen=True, slots=True)
class TwoFactorRuntimeConfig:
    """
    Immutable runtime config for the 2FA module.

    Docs: docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related: apps.api.wiring.modules.two_factor
    """

    env_name: str
    fail_fast: bool
    encryption_key: str
    issuer: str = _DEFAULT_ISSUER
    valid_window: int = _DEFAULT_VALID_WINDOW
    backup_code_warning_threshold: int = _DEFAULT_WARNING_THRESHOLD
    kdf_salt: str = _DEFAULT_KDF_SALT

    def __post_init__(self) -> None:
        """
        Validate 2FA runtime config invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Values are normalized by the loader.
        Raises:
            ValueError: If any value violates required bounds.
        Side Effects:
            None.
        """
        if self.env_name not in _ALLOWED_ENVS:
            raise ValueError(
                f"TwoFactorRuntimeConfig.env_name must be one of {_ALLOWED_ENVS}, "
                f"got {self.env_name!r}"
            )
        if not self.encryption_key:
            raise ValueError("TwoFactorRuntimeConfig.encryption_key must be non-empty")
        if not self.issuer.strip():
            raise ValueError("TwoFactorRuntimeConfig.issuer must be non-empty")
        if self.valid_window < 0:
            raise ValueError(
                f"TwoFactorRuntimeConfig.valid_window must be >= 0, got {self.valid_window}"
            )
        if not 0 <= self.backup_code_warning_threshold <= _MAX_WARNING_THRESHOLD:
            raise ValueError(
                "TwoFactorRuntimeConfig.backup_code_warning_threshold must be in "
                f"[0, {_MAX_WARNING_THRESHOLD}], got {self.backup_code_warning_threshold}"
            )
        if not self.kdf_salt:
            raise ValueError("TwoFactorRuntimeConfig.kdf_salt must be non-empty")

    @property
    def kdf_salt_bytes(self) -> bytes:
        return self.kdf_salt.encode("utf-8")

    def __repr__(self) -> str:
        return (
            "TwoFactorRuntimeConfig("
            f"env_name={self.env_name!r}, fail_fast={self.fail_fast}, encryption_key=***, "
            f"issuer={self.issuer!r}, valid_window={self.valid_window}, "
            f"backup_code_warning_threshold={self.backup_code_warning_threshold})"
        )


def load_two_factor_runtime_config(*, environ: Mapping[str, str]) -> TwoFactorRuntimeConfig:
    """
    Load 2FA runtime config from optional YAML and env overrides.

    Args:
        environ: Environment mapping used to resolve env and override values.
    Returns:
        TwoFactorRuntimeConfig: Validated runtime settings.
    Assumptions:
        Encryption key comes only from env; YAML never holds secrets.
    Raises:
        ValueError: If YAML or env values are invalid, or fail-fast requires a missing key.
    Side Effects:
        Reads at most one YAML file; logs a warning when the dev key is used.
    """
    env_name = _resolve_env_name(environ=environ)
    fail_fast = _resolve_fail_fast(environ=environ, env_name=env_name)
    payload = _load_optional_two_factor_payload(path=_resolve_config_path(environ=environ))

    encryption_key = environ.get(_ENCRYPTION_KEY_KEY, "").strip()
    if not encryption_key:
        if fail_fast:
            raise ValueError(f"{_ENCRYPTION_KEY_KEY} must be set when {_FAIL_FAST_KEY}=true")
        log.warning(
            "two-factor encryption key not configured env=%s; using development key",
            env_name,
        )
        encryption_key = _DEV_ENCRYPTION_KEY

    return TwoFactorRuntimeConfig(
        env_name=env_name,
        fail_fast=fail_fast,
        encryption_key=encryption_key,
        issuer=_resolve_str_setting(
            environ=environ,
            env_key=_ISSUER_KEY,
            payload=payload,
            payload_key="issuer",
            default=_DEFAULT_ISSUER,
        ),
        valid_window=_resolve_int_setting(
            environ=environ,
            env_key=_VALID_WINDOW_KEY,
            payload=payload,
            payload_key="valid_window",
            default=_DEFAULT_VALID_WINDOW,
        ),
        backup_code_warning_threshold=_resolve_int_setting(
            environ=environ,
            env_key=_WARNING_THRESHOLD_KEY,
            payload=payload,
            payload_key="backup_code_warning_threshold",
            default=_DEFAULT_WARNING_THRESHOLD,
        ),
        kdf_salt=_resolve_str_setting(
            environ=environ,
            env_key=_KDF_SALT_KEY,
            payload=payload,
            payload_key="kdf_salt",
            default=_DEFAULT_KDF_SALT,
        ),
    )


def _resolve_config_path(*, environ: Mapping[str, str]) -> Path:
    override = environ.get(_CONFIG_PATH_KEY, "").strip()
    if override:
        return Path(override)
    return Path("configs") / _resolve_env_name(environ=environ) / "two_factor.yaml"


def _resolve_env_name(*, environ: Mapping[str, str]) -> str:
    """
    Resolve normalized runtime environment name.

    Args:
        environ: Environment mapping.
    Returns:
        str: One of `dev`, `prod`, `test`.
    Assumptions:
        Missing env falls back to `dev`.
    Raises:
        ValueError: If value is outside allowed set.
    Side Effects:
        None.
    """
    raw_env = environ.get(_ENV_NAME_KEY, "dev").strip().lower()
    if raw_env not in _ALLOWED_ENVS:
        raise ValueError(f"{_ENV_NAME_KEY} must be one of {_ALLOWED_ENVS}, got {raw_env!r}")
    return raw_env


def _resolve_fail_fast(*, environ: Mapping[str, str], env_name: str) -> bool:
    """
    Resolve fail-fast policy for missing secrets.

    Args:
        environ: Environment mapping.
        env_name: Normalized environment name.
    Returns:
        bool: Effective fail-fast flag.
    Assumptions:
        Enabled by default only for `prod`.
    Raises:
        ValueError: If override is not a boolean literal.
    Side Effects:
        None.
    """
    raw_override = environ.get(_FAIL_FAST_KEY, "").strip()
    if not raw_override:
        return env_name == "prod"
    return _parse_bool(raw_value=raw_override, key=_FAIL_FAST_KEY)


def _load_optional_two_factor_payload(*, path: Path) -> Mapping[str, Any]:
    """
    Load optional `two_factor` mapping from YAML.

    Args:
        path: Config file path.
    Returns:
        Mapping[str, Any]: `two_factor` section, or empty mapping when absent.
    Assumptions:
        A missing file means defaults; unknown keys are ignored.
    Raises:
        ValueError: If YAML structure is invalid.
    Side Effects:
        Reads one UTF-8 file from disk when present.
    """
    if not path.exists():
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("two-factor config must be a mapping at top-level")

    section = raw.get(_SECTION)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{_SECTION} section must be a mapping")
    return section


def _resolve_int_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
    default: int,
) -> int:
    """
    Resolve non-negative integer from env -> payload -> default precedence.

    Args:
        environ: Environment mapping.
        env_key: Env variable name.
        payload: Parsed YAML section.
        payload_key: YAML key name.
        default: Fallback value.
    Returns:
        int: Resolved value.
    Assumptions:
        Env values use base-10.
    Raises:
        ValueError: If value is not a non-negative integer.
    Side Effects:
        None.
    """
    raw = environ.get(env_key, "").strip()
    if raw:
        try:
            parsed = int(raw, 10)
        except ValueError as error:
            raise ValueError(f"{env_key} must be int, got {raw!r}") from error
        if parsed < 0:
            raise ValueError(f"{env_key} must be >= 0, got {parsed}")
        return parsed

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return default
    if isinstance(payload_value, bool) or not isinstance(payload_value, int):
        raise ValueError(
            f"expected int for {_SECTION}.{payload_key}, got {type(payload_value).__name__}"
        )
    if payload_value < 0:
        raise ValueError(f"{_SECTION}.{payload_key} must be >= 0, got {payload_value}")
    return payload_value


def _resolve_str_setting(
    *,
    environ: Mapping[str, str],
    env_key: str,
    payload: Mapping[str, Any],
    payload_key: str,
    default: str,
) -> str:
    raw = environ.get(env_key, "").strip()
    if raw:
        return raw

    payload_value = payload.get(payload_key)
    if payload_value is None:
        return default
    if not isinstance(payload_value, str):
        raise ValueError(
            f"expected string for {_SECTION}.{payload_key}, got {type(payload_value).__name__}"
        )
    normalized = payload_value.strip()
    if not normalized:
        raise ValueError(f"{_SECTION}.{payload_key} must be non-empty")
    return normalized


def _parse_bool(*, raw_value: str, key: str) -> bool:
    normalized = raw_value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(
        f"{key} must be a boolean literal (1/0/true/false/yes/no/on/off), got {raw_value!r}"
    )


__all__ = [
    "TwoFactorRuntimeConfig",
    "load_two_factor_runtime_config",
]
