"""
token_ledger.version — installed distribution version.

Resolution order:
1) importlib.metadata for the ``token-ledger`` distribution (installed or ``pip install -e .``),
2) BASE_VERSION with a ``+source`` local label when running from an uninstalled checkout.
"""

from __future__ import annotations

import platform
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from typing import Dict

DIST_NAME = "token-ledger"

# Keep in step with pyproject.toml.
BASE_VERSION = "0.1.0"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        return _pkg_version(DIST_NAME)
    except PackageNotFoundError:
        return f"{BASE_VERSION}+source"


def version_metadata() -> Dict[str, str]:
    """Version plus interpreter info, for `token-ledger version --json`."""
    v = get_version()
    return {
        "distribution": DIST_NAME,
        "version": v,
        "installed": "false" if v.endswith("+source") else "true",
        "python": platform.python_version(),
    }


__version__ = get_version()
__all__ = ["__version__", "get_version", "version_metadata", "DIST_NAME", "BASE_VERSION"]
