"""Middleware: apps that wrap other apps."""

from .basic_auth import DEFAULT_REALM, basic_auth
from .stack import Stack

__all__ = [
    "DEFAULT_REALM",
    "Stack",
    "basic_auth",
]
