# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Hold original-to-alias tables for classes, ids and custom properties."""

import json
import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, get_args

from cssshuffle.alias import generate

logger = logging.getLogger(__name__)

Namespace = Literal["class", "id", "custom_property"]

NAMESPACES: tuple[Namespace, ...] = get_args(Namespace)


class RegistryFrozenError(RuntimeError):
    """Represent an attempt to allocate an alias after discovery closed."""


@dataclass(frozen=True)
class Identifier:
    """Represent one name within its namespace.

    Attributes:
        namespace: Identifier category.
        name: Raw name without its ``.``, ``#`` or ``--`` prefix.
    """

    namespace: Namespace
    name: str


@dataclass(frozen=True)
class MappingEntry:
    """Represent one exported alias assignment."""

    namespace: Namespace
    original: str
    alias: str


class NamespaceRegistry:
    """Assign aliases on first encounter and resolve them afterwards.

    All three namespaces share one allocation counter, so an alias handed
    to a class name is never handed to an id or custom property.
    """

    def __init__(self) -> None:
        """Initialize empty tables and counter."""
        self._tables: dict[Namespace, dict[str, str]] = {
            namespace: {} for namespace in NAMESPACES
        }
        self._entries: list[MappingEntry] = []
        self._next_index: int = 0
        self._frozen: bool = False
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return self._next_index

    @property
    def frozen(self) -> bool:
        """Whether the registry is closed for new names."""
        return self._frozen

    def freeze(self) -> None:
        """Close the registry for new names."""
        self._frozen = True
        logger.debug("Registry frozen", extra={"aliases": self._next_index})

    def register(self, namespace: Namespace, name: str) -> str:
        """Return the alias for a name, allocating one on first encounter.

        Args:
            namespace: Identifier category.
            name: Raw identifier name.

        Returns:
            Alias assigned to the name.

        Raises:
            RegistryFrozenError: If the name is new and the registry is frozen.
        """
        table = self._tables[namespace]
        with self._lock:
            existing = table.get(name)
            if existing is not None:
                return existing
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register {namespace} {name!r}: registry is frozen"
                )
            alias = generate(self._next_index)
            self._next_index += 1
            table[name] = alias
            self._entries.append(
                MappingEntry(namespace=namespace, original=name, alias=alias)
            )
            return alias

    def register_all(self, identifiers: Iterable[Identifier]) -> None:
        """Register identifiers in iteration order.

        Args:
            identifiers: Identifiers to register.
        """
        for identifier in identifiers:
            self.register(identifier.namespace, identifier.name)

    def lookup(self, namespace: Namespace, name: str) -> str | None:
        """Resolve an alias without allocating.

        Args:
            namespace: Identifier category.
            name: Raw identifier name.

        Returns:
            Alias when registered, otherwise ``None``.
        """
        return self._tables[namespace].get(name)

    def mapping(self, namespace: Namespace) -> dict[str, str]:
        """Return a copy of one namespace table in allocation order."""
        return dict(self._tables[namespace])

    def entries(self) -> Iterator[MappingEntry]:
        """Iterate assignments in allocation order."""
        return iter(list(self._entries))

    def to_json(self) -> str:
        """Serialize the registry as a mapping artifact.

        Returns:
            JSON text with one table per namespace plus ordered entries.
        """
        payload: dict[str, object] = {
            namespace: self._tables[namespace] for namespace in NAMESPACES
        }
        payload["entries"] = [
            {
                "namespace": entry.namespace,
                "original": entry.original,
                "alias": entry.alias,
            }
            for entry in self._entries
        ]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def write_json(self, path: Path) -> None:
        """Write the mapping artifact to disk.

        Args:
            path: Target JSON file.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{self.to_json()}\n", encoding="utf-8")

    @classmethod
    def from_json(cls, text: str) -> "NamespaceRegistry":
        """Rebuild a frozen registry from an exported mapping artifact.

        Args:
            text: JSON produced by ``to_json``.

        Returns:
            Frozen registry holding the exported assignments.

        Raises:
            ValueError: If the payload is not a mapping artifact.
        """
        payload = json.loads(text)
        if not isinstance(payload, dict) or not isinstance(
            payload.get("entries"), list
        ):
            raise ValueError("Mapping artifact must contain an 'entries' list")

        registry = cls()
        for raw in payload["entries"]:
            namespace = raw.get("namespace")
            if namespace not in NAMESPACES:
                raise ValueError(f"Unknown namespace in mapping artifact: {namespace}")
            entry = MappingEntry(
                namespace=namespace, original=raw["original"], alias=raw["alias"]
            )
            registry._tables[namespace][entry.original] = entry.alias
            registry._entries.append(entry)
        registry._next_index = len(registry._entries)
        registry.freeze()
        return registry
