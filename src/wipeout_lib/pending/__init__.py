# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Listing of pending disposals.

This module defines the `PendingPresenter` class rendering the items of
the disposal queue as a rich panel or as YAML.
"""

from .presenter import PendingPresenter

__all__ = [
    "PendingPresenter",
]
