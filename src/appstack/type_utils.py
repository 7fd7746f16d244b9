"""Type aliases shared across appstack."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar, Union

if TYPE_CHECKING:
    from .http.request import Request
    from .http.response import Response


T = TypeVar("T")

MaybeAwaitable = T | Awaitable[T]

# What an app may hand back before normalization.
ResponseLike = Union["Response", Mapping[str, Any], tuple[int, Any, Any]]

App = Callable[["Request"], MaybeAwaitable[ResponseLike]]

ErrorHandler = Callable[[str], Any]
CloseHandler = Callable[[], Any]
