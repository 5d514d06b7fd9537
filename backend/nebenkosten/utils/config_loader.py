import copy
import os
from pathlib import Path

import yaml

from nebenkosten.exceptions import ConfigurationError

_DEFAULT_PATH = Path(__file__).resolve().parent.parent / "config" / "statement.yaml"
_REQUIRED_KEYS = ("payment_term_days", "prepayment_months_max", "notices")
_NOTICE_KEYS = ("receipts", "objection")


def _config_path() -> Path:
    """Read BILLING_CONFIG_PATH at call time (supports env var changes in tests)."""
    return Path(os.getenv("BILLING_CONFIG_PATH", str(_DEFAULT_PATH)))


def _merge(defaults: dict, override: dict) -> dict:
    merged = dict(defaults)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _check(settings: dict) -> None:
    missing = [k for k in _REQUIRED_KEYS if k not in settings]
    if missing:
        raise ConfigurationError(f"Missing statement settings: {', '.join(missing)}")
    term = settings["payment_term_days"]
    if isinstance(term, bool) or not isinstance(term, int) or term < 0:
        raise ConfigurationError("payment_term_days must be a non-negative integer")
    notices = settings["notices"]
    for name in _NOTICE_KEYS:
        notice = notices.get(name) if isinstance(notices, dict) else None
        if not isinstance(notice, dict) or not all(
            isinstance(notice.get(k), str) for k in ("title", "text")
        ):
            raise ConfigurationError(f"notices.{name} needs a title and a text")


# Simple dict cache keyed by path so test overrides are picked up
_cache: dict[str, dict] = {}


def load_statement_settings() -> dict:
    """Load statement settings, falling back to the packaged defaults for missing keys.

    Nested mappings (the notices) are merged key by key. Callers get a copy.
    """
    path = _config_path()
    cache_key = str(path)
    if cache_key not in _cache:
        if not path.exists():
            raise ConfigurationError(f"No statement settings found at {path}")
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Statement settings in {path} must be a mapping")

        if path != _DEFAULT_PATH:
            with open(_DEFAULT_PATH, encoding="utf-8") as f:
                defaults = yaml.safe_load(f)
            loaded = _merge(defaults, loaded)

        _check(loaded)
        _cache[cache_key] = loaded
    return copy.deepcopy(_cache[cache_key])


def get_payment_term_days() -> int:
    return load_statement_settings()["payment_term_days"]


def get_prepayment_months_max() -> int:
    return load_statement_settings()["prepayment_months_max"]


def get_notices() -> dict:
    return load_statement_settings()["notices"]
