"""Pipeline — runs the stages in order and hands each result to the next.

    load → index → catalog → common attributes → descriptions → compose → write

Each stage is a function of the previous results; `PipelineContext` records
them all. Queries are issued one at a time, and any failure aborts the run
before anything is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .catalog import DEFAULT_MAX_ENUM_VALUES, build_attribute_catalog
from .common import DEFAULT_COMMON_THRESHOLD, extract_common_attributes
from .composer import ComposedDocument, compose_rdfs, write_document
from .descriptions import read_descriptions
from .errors import SelectionError
from .indexer import build_class_index
from .store import CIM, StoreGateway
from .types import AttributeCatalog, ClassIndex, CommonAttributes, DescriptionSet

logger = logging.getLogger(__name__)

ALL_SOURCES = "all"


@dataclass
class PipelineConfig:
    sources: list[Path]
    descriptions: Path
    output: Path
    missing_report: Path | None = None
    max_enum_values: int = DEFAULT_MAX_ENUM_VALUES
    common_threshold: int = DEFAULT_COMMON_THRESHOLD
    include_unmatched: bool = False
    store: str = "default"
    cim_namespace: str = str(CIM)


@dataclass(frozen=True)
class PipelineContext:
    """Results of every stage up to (but not including) composition."""
    config: PipelineConfig
    index: ClassIndex
    catalog: AttributeCatalog
    common: CommonAttributes
    descriptions: DescriptionSet

    def compose(self) -> ComposedDocument:
        return compose_rdfs(
            self.descriptions,
            self.catalog,
            self.common,
            include_unmatched=self.config.include_unmatched,
        )


@dataclass
class PipelineResult:
    output: Path
    document: ComposedDocument
    context: PipelineContext = field(repr=False)


def select_sources(sources: Sequence[str | Path], selection: str = ALL_SOURCES) -> list[Path]:
    """Pick the sources to ingest: every source for "all", else a 1-based index."""
    paths = [Path(s) for s in sources]
    if not paths:
        raise SelectionError("No input sources given")
    choice = selection.strip().lower()
    if choice == ALL_SOURCES:
        return paths
    if not choice.isdigit() or not 1 <= int(choice) <= len(paths):
        raise SelectionError(
            f"Invalid selection '{selection}': choose 1-{len(paths)} or '{ALL_SOURCES}'"
        )
    return [paths[int(choice) - 1]]


def build_context(config: PipelineConfig, store: StoreGateway) -> PipelineContext:
    """Load the sources into `store` and run every stage before composition."""
    store.clear()
    store.load(config.sources)
    index = build_class_index(store)
    catalog = build_attribute_catalog(store, index, max_enum_values=config.max_enum_values)
    common = extract_common_attributes(catalog, threshold=config.common_threshold)
    descriptions = read_descriptions(config.descriptions)
    return PipelineContext(
        config=config,
        index=index,
        catalog=catalog,
        common=common,
        descriptions=descriptions,
    )


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    with StoreGateway(store=config.store, cim_namespace=config.cim_namespace) as store:
        context = build_context(config, store)
    document = context.compose()
    output = write_document(document, config.output)
    if config.missing_report is not None:
        document.missing.write(config.missing_report)
        logger.info("Missing documentation report written to %s", config.missing_report)
    return PipelineResult(output=output, document=document, context=context)
