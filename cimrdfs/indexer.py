"""Class-Instance Indexer — discovers class types and their instances.

One query finds every distinct rdf:type object; one further query per class
type fetches its instances. Results are collected into sets, so the index does
not depend on the order in which the store returns bindings.
"""

from __future__ import annotations

import logging

from rdflib import URIRef

from .store import StoreGateway
from .types import ClassIndex, ClassType

logger = logging.getLogger(__name__)


CLASS_TYPES_QUERY = """
SELECT DISTINCT ?classType WHERE {
    ?subject rdf:type ?classType .
}
"""

INSTANCES_QUERY = """
SELECT DISTINCT ?subject WHERE {
    ?subject rdf:type ?classType .
}
"""


def discover_class_types(store: StoreGateway) -> frozenset[ClassType]:
    """Return every IRI used as the object of rdf:type."""
    found: set[ClassType] = set()
    for row in store.query(CLASS_TYPES_QUERY):
        term = row.get("classType")
        if isinstance(term, URIRef):
            found.add(ClassType.from_uri(term))
    return frozenset(found)


def instances_of(store: StoreGateway, class_uri: str) -> frozenset[str]:
    """Return the IRIs of every subject typed as `class_uri`."""
    found: set[str] = set()
    for row in store.query(INSTANCES_QUERY, bindings={"classType": URIRef(class_uri)}):
        term = row.get("subject")
        if isinstance(term, URIRef):
            found.add(str(term))
    return frozenset(found)


def build_class_index(store: StoreGateway) -> ClassIndex:
    """Build the class local name → instance URIs index.

    Class URIs sharing a local name are merged under that name. An instance
    typed by several classes is kept under the lexicographically first class
    name so that each instance is owned by exactly one entry; the other
    classes stay in the index, possibly with no owned instances.
    """
    class_types = discover_class_types(store)
    by_name: dict[str, set[str]] = {}
    for class_type in sorted(class_types, key=lambda c: (c.local_name, c.uri)):
        if class_type.local_name in by_name:
            logger.warning(
                "Class local name '%s' is shared by several URIs; merging %s",
                class_type.local_name, class_type.uri,
            )
        by_name.setdefault(class_type.local_name, set()).update(
            instances_of(store, class_type.uri)
        )

    owner: dict[str, str] = {}
    for name in sorted(by_name):
        for uri in by_name[name]:
            if uri in owner:
                logger.debug("Instance %s already indexed under %s, not %s", uri, owner[uri], name)
                continue
            owner[uri] = name

    # every discovered class keeps its key, even if another class owns all its instances
    instances: dict[str, set[str]] = {name: set() for name in by_name}
    for uri, name in owner.items():
        instances[name].add(uri)

    index = ClassIndex(
        instances={name: frozenset(uris) for name, uris in instances.items()},
        class_types=class_types,
    )
    logger.info("Indexed %d class types, %d instances", len(index), len(owner))
    return index
