# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Boundary between services and storage failures.

Services return ``Result`` values; anything the store or cache raises that
is not a business outcome is logged here and reported as an internal error.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import asyncpg
import redis

from ..core.document_store import StoreError
from ..core.errors import ServiceError
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Result

logger = get_logger(__name__)

T = TypeVar("T")

STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    StoreError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    redis.RedisError,
    OSError,
)


def storage_guard(
    operation: str,
) -> Callable[
    [Callable[..., Awaitable[Result[T, ServiceError]]]],
    Callable[..., Awaitable[Result[T, ServiceError]]],
]:
    """Turn uncaught storage exceptions raised by ``operation`` into ``Err``."""

    def decorator(
        func: Callable[..., Awaitable[Result[T, ServiceError]]],
    ) -> Callable[..., Awaitable[Result[T, ServiceError]]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Result[T, ServiceError]:
            try:
                return await func(*args, **kwargs)
            except STORAGE_ERRORS as e:
                logger.exception("Storage failure during %s", operation)
                return Err(ServiceError.internal(f"{operation} failed: {e}"))

        return wrapper

    return decorator
