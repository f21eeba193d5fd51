"""Store Gateway — the rdflib graph the pipeline loads and queries.

The gateway is the only component that touches the triple store. Queries are
issued one at a time and their solutions are consumed before the next query
is sent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from rdflib import Graph, Namespace, URIRef
from rdflib.namespace import RDF, RDFS
from rdflib.term import Node

from .errors import IngestionError, QueryError

logger = logging.getLogger(__name__)

CIM = Namespace("http://iec.ch/TC57/CIM100#")

# Prefixes available to every query
QUERY_NAMESPACES: dict[str, Namespace] = {
    "rdf": Namespace(str(RDF)),
    "rdfs": Namespace(str(RDFS)),
    "cim": CIM,
}


class StoreGateway:
    """Bulk-loads RDF/XML sources and answers SPARQL SELECT patterns.

    `store` names the rdflib store plugin backing the graph; the default is
    rdflib's in-memory store. `cim_namespace` is the IRI bound to the `cim`
    query prefix, for data written against another CIM version.
    """

    def __init__(self, store: str = "default", cim_namespace: str = str(CIM)) -> None:
        self._graph = Graph(store=store)
        self.namespaces = dict(QUERY_NAMESPACES, cim=Namespace(cim_namespace))
        for prefix, ns in self.namespaces.items():
            self._graph.bind(prefix, ns, replace=True)

    def __enter__(self) -> StoreGateway:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._graph)

    def load(self, sources: Iterable[str | Path]) -> None:
        """Parse each RDF/XML source into the store, in the given order."""
        for source in sources:
            path = Path(source)
            before = len(self._graph)
            try:
                self._graph.parse(source=str(path), format="xml")
            except Exception as exc:
                raise IngestionError(str(path), str(exc) or type(exc).__name__) from exc
            logger.info("Loaded %s (%d triples)", path, len(self._graph) - before)

    def clear(self) -> None:
        """Remove every triple. Safe to call on an empty store."""
        self._graph.remove((None, None, None))

    def query(
        self,
        pattern: str,
        bindings: Mapping[str, Node | str] | None = None,
    ) -> Iterator[dict[str, Node]]:
        """Run a SELECT query and yield one {variable: term} dict per solution.

        Plain strings in `bindings` are bound as IRIs.
        """
        init = {
            name: value if isinstance(value, Node) else URIRef(value)
            for name, value in (bindings or {}).items()
        }
        logger.debug("Query %s with %s", " ".join(pattern.split()), init)
        try:
            result = self._graph.query(pattern, initNs=self.namespaces, initBindings=init)
            rows = iter(result)
        except Exception as exc:
            raise QueryError(f"Query failed: {exc}") from exc
        while True:
            try:
                row = next(rows)
            except StopIteration:
                return
            except Exception as exc:
                raise QueryError(f"Query failed: {exc}") from exc
            yield _as_dict(row)

    def close(self) -> None:
        self._graph.close()


def _as_dict(row: Any) -> dict[str, Node]:
    return {str(name): value for name, value in row.asdict().items()}
