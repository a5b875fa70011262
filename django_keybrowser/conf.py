"""Settings access for django-keybrowser.

All options live in a single ``KEYBROWSER`` dict in Django settings::

    KEYBROWSER = {
        "CONNECTIONS": {
            "local": {"LOCATION": "redis://localhost:6379/0"},
            "sessions": {"LOCATION": "valkey.internal:6380,password=secret,ssl=true", "LIBRARY": "valkey"},
        },
        "USE_MOCKS": False,
    }

Settings are read on every access so ``override_settings`` works in tests.
"""

from __future__ import annotations

import os
from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "CONNECTIONS": {},
    "USE_MOCKS": None,
    "DEFAULT_PAGE_SIZE": 100,
    "MAX_PAGE_SIZE": 500,
    "MAX_SCAN_ITERATIONS": 100,
    "STREAM_READ_COUNT": 200,
}

# Environment toggle honoured when USE_MOCKS is not set explicitly
MOCKS_ENV_VAR = "BFF_USE_MOCKS"


def get_settings() -> dict[str, Any]:
    """Return the merged ``KEYBROWSER`` settings (defaults filled in)."""
    merged = dict(DEFAULTS)
    merged.update(getattr(settings, "KEYBROWSER", {}))
    return merged


def get_setting(name: str) -> Any:
    return get_settings()[name]


def use_mocks() -> bool:
    """Whether every endpoint should answer with canned data."""
    configured = get_setting("USE_MOCKS")
    if configured is None:
        return os.environ.get(MOCKS_ENV_VAR, "").lower() == "true"
    return bool(configured)
