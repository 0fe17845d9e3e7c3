# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Shared pytest setup for css-shuffle tests."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

from cssshuffle import Namespace, NamespaceRegistry  # noqa: E402

RegistryFactory = Callable[..., NamespaceRegistry]


@pytest.fixture
def frozen_registry() -> RegistryFactory:
    """Build frozen registries from ``(namespace, name)`` pairs in order."""

    def build(*entries: tuple[Namespace, str]) -> NamespaceRegistry:
        registry = NamespaceRegistry()
        for namespace, name in entries:
            registry.register(namespace, name)
        registry.freeze()
        return registry

    return build
