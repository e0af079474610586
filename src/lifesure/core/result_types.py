# LifeSure - Application and Claim Lifecycle Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Result types for error handling without exceptions.

Lifecycle services report business failures as ``Err(ServiceError)``
instead of raising, and the API layer turns the error kind into an HTTP
status. Exceptions remain reserved for programming errors.
"""

from collections.abc import Callable
from typing import Any, Generic, NoReturn, TypeVar, Union

from attrs import field, frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@frozen
class Ok(Generic[T]):
    """Success result wrapper."""

    value: T = field()

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return True

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value, ignoring the default."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Raise ValueError as this is Ok."""
        raise ValueError("Called unwrap_err on Ok value")

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], "Result[U, Any]"]) -> "Result[U, Any]":
        """Chain an operation that itself returns a Result."""
        return func(self.value)


@frozen
class Err(Generic[E]):
    """Error result wrapper."""

    error: E = field()

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return False

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return True

    def unwrap(self) -> NoReturn:
        """Raise ValueError as this is Err."""
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    def unwrap_or(self, default: U) -> U:
        """Return the default value."""
        return default

    def unwrap_err(self) -> E:
        """Get the error value."""
        return self.error

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        """No-op for Err values."""
        return self

    def and_then(self, func: Callable[[Any], Any]) -> "Err[E]":
        """No-op for Err values."""
        return self


Result = Union[Ok[T], Err[E]]

__all__ = ["Ok", "Err", "Result"]
