# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Central logging utilities for the LifeSure backend.

Every module obtains its logger through :func:`get_logger` so that the root
configuration is applied exactly once, whichever entry point (the ASGI app,
a migration, a test) imports first.

Key Features
------------
1. configure_logging(): idempotent initialization of the root logger.
2. get_logger(name): typed helper that always returns a configured logger.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER_NAME: Final = "lifesure"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe - configuration will only
    be applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    logger = logging.getLogger(name or _ROOT_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    return logger
