"""RDFS Composer — merges discovered schema elements with authored text.

Emission order is fixed so repeated runs over the same input produce
byte-identical documents:

  1. class types          sorted by local name
  2. attributes           common names and class-qualified names, sorted
  3. enum values          sorted

Each element is emitted exactly once. An authored description is copied
verbatim; an element without one gets a placeholder block (name and role
only) and is listed in the missing documentation report.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from xml.sax.saxutils import escape

from rdflib.namespace import RDF, RDFS

from .common import class_specific_attributes
from .errors import OutputWriteError
from .types import (
    AttributeCatalog,
    CommonAttributes,
    DescriptionSet,
    ElementRole,
    SchemaElement,
)

logger = logging.getLogger(__name__)

CIMS_ENUM = "http://iec.ch/TC57/1999/rdf-schema-extensions-19990926#enum"

ROLE_TYPES: dict[ElementRole, str] = {
    ElementRole.CLASS: str(RDFS.Class),
    ElementRole.ATTRIBUTE: str(RDF.Property),
    ElementRole.ENUM_VALUE: CIMS_ENUM,
}

DOCUMENT_END = "</rdf:RDF>"


# ---------------------------------------------------------------------------
# Missing documentation report
# ---------------------------------------------------------------------------

@dataclass
class MissingDocumentationReport:
    """Elements that received a synthesized placeholder."""
    entries: list[SchemaElement] = field(default_factory=list)

    def add(self, element: SchemaElement) -> None:
        self.entries.append(element)

    def names(self) -> list[str]:
        return [e.name for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return any(e.name == name for e in self.entries)

    def format(self) -> str:
        lines = [f"Missing documentation: {len(self.entries)} element(s)"]
        for e in self.entries:
            lines.append(f"  {e.role.value:<9} {e.name}")
        return "\n".join(lines)

    def write(self, path: str | Path) -> None:
        _atomic_write(Path(path), self.format() + "\n")


@dataclass(frozen=True)
class ComposedDocument:
    text: str
    elements: tuple[SchemaElement, ...]
    missing: MissingDocumentationReport

    def documented(self) -> list[str]:
        missing = set(self.missing.names())
        return [e.name for e in self.elements if e.name not in missing]


# ---------------------------------------------------------------------------
# Element discovery
# ---------------------------------------------------------------------------

def schema_elements(
    catalog: AttributeCatalog,
    common: CommonAttributes,
) -> list[SchemaElement]:
    """Every discovered element, in emission order, each name once."""
    classes = [SchemaElement(name, ElementRole.CLASS) for name in sorted(common.class_types)]

    attributes = [SchemaElement(name, ElementRole.ATTRIBUTE) for name in common.common]
    for class_name, attr in class_specific_attributes(catalog, common):
        if "." in attr:
            # already qualified, e.g. Switch.normalOpen
            attributes.append(SchemaElement(attr, ElementRole.ATTRIBUTE, domain=class_name))
        else:
            attributes.append(SchemaElement(
                f"{class_name}.{attr}", ElementRole.ATTRIBUTE, domain=class_name, fallback=attr,
            ))
    attributes.sort(key=lambda e: (e.name, e.domain or ""))

    enum_values = [SchemaElement(name, ElementRole.ENUM_VALUE) for name in sorted(catalog.enums.values())]

    ordered: list[SchemaElement] = []
    seen: dict[str, SchemaElement] = {}
    for element in classes + attributes + enum_values:
        if element.name in seen:
            logger.warning("%r already emitted as %r; skipping", element, seen[element.name])
            continue
        seen[element.name] = element
        ordered.append(element)
    return ordered


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def placeholder(element: SchemaElement) -> str:
    """A minimal rdf:Description for an undocumented element."""
    label = element.name
    if element.role == ElementRole.ATTRIBUTE:
        label = element.name.rsplit(".", 1)[-1]
    lines = [
        f'  <rdf:Description rdf:about="#{_attr(element.name)}">',
        f'    <rdfs:label xml:lang="en">{escape(label)}</rdfs:label>',
        f'    <rdf:type rdf:resource="{_attr(ROLE_TYPES[element.role])}"/>',
    ]
    if element.domain is not None:
        lines.append(f'    <rdfs:domain rdf:resource="#{_attr(element.domain)}"/>')
    lines.append("  </rdf:Description>")
    return "\n".join(lines)


def _attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def compose_rdfs(
    descriptions: DescriptionSet,
    catalog: AttributeCatalog,
    common: CommonAttributes,
    include_unmatched: bool = False,
) -> ComposedDocument:
    """Build the RDFS document text. Nothing is written here."""
    elements = schema_elements(catalog, common)
    missing = MissingDocumentationReport()
    used: set[str] = set()
    blocks: list[str] = []

    for element in elements:
        for key in element.lookup_keys():
            authored = descriptions.get(key)
            if authored is not None and key not in used:
                used.add(key)
                blocks.append(authored.fragment)
                break
        else:
            missing.add(element)
            blocks.append(placeholder(element))

    if include_unmatched:
        for name in descriptions.names():
            if name not in used:
                blocks.append(descriptions.entries[name].fragment)

    parts = [descriptions.header, *blocks, DOCUMENT_END]
    text = "\n".join(parts) + "\n"

    logger.info(
        "Composed %d elements (%d authored, %d placeholders)",
        len(elements), len(elements) - len(missing), len(missing),
    )
    for entry in missing.entries:
        logger.warning("No authored description for %s '%s'", entry.role.value, entry.name)
    return ComposedDocument(text=text, elements=tuple(elements), missing=missing)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def write_document(document: ComposedDocument, path: str | Path) -> Path:
    target = Path(path)
    _atomic_write(target, document.text)
    logger.info("RDFS document written to %s", target)
    return target


def _atomic_write(target: Path, text: str) -> None:
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", newline="", dir=target.parent,
            prefix=f".{target.name}.", delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
        os.replace(tmp_name, target)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise OutputWriteError(str(target), exc.strerror or str(exc)) from exc
