"""Core types for cimrdfs — the transient structures each stage produces.

Pipeline:
  ClassIndex        class local name → instance URIs
  AttributeCatalog  class local name → attribute names (+ observed values, enums)
  CommonAttributes  (class types, common attribute names)
  DescriptionSet    header line + name → authored fragment

Every structure is built fresh per run and never mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from rdflib.term import Node


def local_name(uri: str) -> str:
    """Return the part of a URI after the final '#' (or '/' when there is none).

    >>> local_name("http://iec.ch/TC57/CIM100#VoltageLimit")
    'VoltageLimit'
    """
    text = str(uri)
    if "#" in text:
        return text.rsplit("#", 1)[1]
    return text.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# ClassType — a URI used as the object of rdf:type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassType:
    uri: str
    local_name: str

    @classmethod
    def from_uri(cls, uri: str) -> ClassType:
        return cls(uri=str(uri), local_name=local_name(uri))

    def __repr__(self) -> str:
        return f"ClassType({self.local_name})"


# ---------------------------------------------------------------------------
# ClassIndex — class local name → instance URIs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassIndex:
    """Mapping from class local name to the set of its instance URIs.

    Each instance URI appears under exactly one class. Every discovered class
    type has a key, even when all of its instances are owned elsewhere.
    """
    instances: dict[str, frozenset[str]] = field(default_factory=dict)
    class_types: frozenset[ClassType] = field(default_factory=frozenset)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.instances))

    def __len__(self) -> int:
        return len(self.instances)

    def __getitem__(self, class_name: str) -> frozenset[str]:
        return self.instances[class_name]

    def all_instances(self) -> frozenset[str]:
        merged: set[str] = set()
        for uris in self.instances.values():
            merged.update(uris)
        return frozenset(merged)


# ---------------------------------------------------------------------------
# EnumRegistry — enumerated attribute names and their code values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnumRegistry:
    """Attribute local names classified as enumerated, with their code names."""
    codes: dict[str, frozenset[str]] = field(default_factory=dict)

    def __contains__(self, attribute: object) -> bool:
        return attribute in self.codes

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.codes))

    def __len__(self) -> int:
        return len(self.codes)

    def values(self) -> frozenset[str]:
        """All enum value names across every enumerated attribute."""
        merged: set[str] = set()
        for names in self.codes.values():
            merged.update(names)
        return frozenset(merged)


# ---------------------------------------------------------------------------
# AttributeCatalog — output of the catalog builder
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AttributeCatalog:
    attributes: dict[str, frozenset[str]] = field(default_factory=dict)
    values: dict[tuple[str, str], frozenset[Node]] = field(default_factory=dict)
    enums: EnumRegistry = field(default_factory=EnumRegistry)

    def classes(self) -> list[str]:
        return sorted(self.attributes)

    def attributes_of(self, class_name: str) -> frozenset[str]:
        return self.attributes.get(class_name, frozenset())

    def classes_with(self, attribute: str) -> frozenset[str]:
        """Class names under which `attribute` was observed."""
        return frozenset(
            name for name, attrs in self.attributes.items() if attribute in attrs
        )

    def __repr__(self) -> str:
        return (
            f"AttributeCatalog({len(self.attributes)} classes, "
            f"{len(self.values)} attributes, {len(self.enums)} enums)"
        )


@dataclass(frozen=True)
class CommonAttributes:
    """Class-type set and the attribute names promoted to common status."""
    class_types: frozenset[str] = field(default_factory=frozenset)
    common: frozenset[str] = field(default_factory=frozenset)


# ---------------------------------------------------------------------------
# Descriptions — authored fragments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Description:
    name: str
    fragment: str
    line: int = 0

    def __repr__(self) -> str:
        return f"Description({self.name}@{self.line})"


@dataclass(frozen=True)
class DescriptionSet:
    """The namespace header line plus the name → description mapping.

    `entries` keeps source order; lookups go through `get()`.
    """
    header: str
    entries: dict[str, Description] = field(default_factory=dict)

    def get(self, name: str) -> Description | None:
        return self.entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def names(self) -> list[str]:
        return list(self.entries)


# ---------------------------------------------------------------------------
# Schema elements — what the composer emits
# ---------------------------------------------------------------------------

class ElementRole(Enum):
    """Structural role of an emitted schema element."""
    CLASS = "class"
    ATTRIBUTE = "attribute"
    ENUM_VALUE = "enum"


@dataclass(frozen=True)
class SchemaElement:
    """A discovered class, attribute, or enum value.

    `domain` is the owning class for class-specific attributes and None
    otherwise. `fallback` is an alternative lookup key (the bare attribute
    name for a class-qualified attribute).
    """
    name: str
    role: ElementRole
    domain: str | None = None
    fallback: str | None = None

    def lookup_keys(self) -> tuple[str, ...]:
        if self.fallback and self.fallback != self.name:
            return (self.name, self.fallback)
        return (self.name,)

    def __repr__(self) -> str:
        return f"{self.role.value}({self.name})"
