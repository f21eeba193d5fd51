"""Attribute Catalog Builder — attributes per class and enum classification.

Every indexed instance is queried once for its (predicate, object) pairs. The
predicate's local name is recorded under the instance's class and the object
is added to that attribute's observed values.

An attribute is *enumerated* when its values look like controlled-vocabulary
codes:
  - every observed value is an IRI,
  - none of those IRIs is itself an indexed instance,
  - there are at most `max_enum_values` distinct values, and
  - the codes recur (fewer distinct values than observations).

Once an attribute name is registered as enumerated it stays registered, even
if the same name is free-form under another class.
"""

from __future__ import annotations

import logging
from typing import Collection, Iterable, Iterator

from rdflib import URIRef
from rdflib.namespace import RDF
from rdflib.term import Node

from .store import StoreGateway
from .types import AttributeCatalog, ClassIndex, EnumRegistry, local_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENUM_VALUES = 32

INSTANCE_TRIPLES_QUERY = """
SELECT ?predicate ?object WHERE {
    ?instance ?predicate ?object .
}
"""


def instance_attributes(store: StoreGateway, instance_uri: str) -> Iterator[tuple[URIRef, Node]]:
    """Yield the (predicate, object) pairs attached to one instance."""
    for row in store.query(INSTANCE_TRIPLES_QUERY, bindings={"instance": URIRef(instance_uri)}):
        yield row["predicate"], row["object"]


def is_enumerated(
    values: Collection[Node],
    instances: Collection[str],
    observations: int,
    max_enum_values: int = DEFAULT_MAX_ENUM_VALUES,
) -> bool:
    """Classify a set of observed values as enum codes or not.

    `observations` counts (instance, value) pairs; codes must be reused, so
    there have to be fewer distinct values than observations.
    """
    if not values or len(values) > max_enum_values:
        return False
    if len(values) >= observations:
        return False
    for value in values:
        if not isinstance(value, URIRef):
            return False
        if str(value) in instances:
            return False
    return True


def build_attribute_catalog(
    store: StoreGateway,
    index: ClassIndex,
    max_enum_values: int = DEFAULT_MAX_ENUM_VALUES,
    ignored_predicates: Iterable[str] = (str(RDF.type),),
) -> AttributeCatalog:
    ignored = {str(p) for p in ignored_predicates}
    attributes: dict[str, set[str]] = {name: set() for name in index}
    values: dict[tuple[str, str], set[Node]] = {}
    counts: dict[tuple[str, str], int] = {}

    for class_name in index:
        for instance_uri in sorted(index[class_name]):
            for predicate, obj in instance_attributes(store, instance_uri):
                if str(predicate) in ignored:
                    continue
                attr = local_name(predicate)
                attributes[class_name].add(attr)
                values.setdefault((class_name, attr), set()).add(obj)
                counts[(class_name, attr)] = counts.get((class_name, attr), 0) + 1

    all_instances = index.all_instances()
    codes: dict[str, set[str]] = {}
    for key, observed in sorted(values.items(), key=lambda kv: kv[0]):
        class_name, attr = key
        if is_enumerated(observed, all_instances, counts[key], max_enum_values):
            logger.debug("%s.%s classified as enumerated (%d codes)", class_name, attr, len(observed))
            codes.setdefault(attr, set()).update(local_name(v) for v in observed)

    catalog = AttributeCatalog(
        attributes={name: frozenset(attrs) for name, attrs in attributes.items()},
        values={key: frozenset(v) for key, v in values.items()},
        enums=EnumRegistry({attr: frozenset(names) for attr, names in codes.items()}),
    )
    logger.info("Catalogued %r", catalog)
    return catalog
