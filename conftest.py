"""Repo-wide test fixtures.

Snapshots and restores the BITPAY_* environment variables between tests so a
test that sets one cannot leak configuration into the next.
"""

from __future__ import annotations

import os

import pytest

_SENSITIVE_ENV_VARS = [
    "BITPAY_API_URL",
    "BITPAY_NETWORK",
    "BITPAY_TIMEOUT",
    "BITPAY_ACCEPT_VERSION",
    "BITPAY_PLUGIN_INFO",
]


@pytest.fixture(autouse=True)
def _restore_env():
    """Snapshot BITPAY_* env vars before each test and restore after."""
    snapshot = {}
    for var in _SENSITIVE_ENV_VARS:
        val = os.environ.get(var)
        if val is not None:
            snapshot[var] = val

    yield

    # Restore: remove any that were added, reset any that changed
    for var in _SENSITIVE_ENV_VARS:
        if var in snapshot:
            os.environ[var] = snapshot[var]
        else:
            os.environ.pop(var, None)
