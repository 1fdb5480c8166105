"""Kitty registry source package.

This package contains:
- config: Configuration loading and management
- kitties: Kitty registry, owner index, ledger and operations
"""

from __future__ import annotations

__all__: list[str] = []
