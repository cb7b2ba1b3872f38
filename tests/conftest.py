"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest
from rich.console import Console


@pytest.fixture
def console() -> Console:
    """A plain-text console writing into memory. Read it with ``console.file.getvalue()``."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)
