"""
Core domain layer for machine-meta.

This package contains pure title-parsing logic. Nothing here performs I/O
except through the store protocol declared in ``dedup``.
"""

from __future__ import annotations

__all__ = []
