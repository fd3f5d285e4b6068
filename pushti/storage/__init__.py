# -*- coding: utf-8 -*-
"""Persistent key-value storage with change notification."""

from .channel import ChangeChannel, StorageChange
from .local import LocalStorage, StoredValue

__all__ = [
    "ChangeChannel",
    "LocalStorage",
    "StorageChange",
    "StoredValue",
]
