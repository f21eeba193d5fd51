"""Switchgear — end-to-end cimrdfs demonstration.

Two switching device classes (Breaker, Switch) share a `status` attribute
whose values are drawn from {OPEN_CODE, CLOSED_CODE}; each also carries its
own `ratedCurrent`. Terminals reference the devices.

Shows every stage:
  1. Load and index class types / instances
  2. Attribute catalog and enum classification
  3. Common attribute extraction
  4. Authored descriptions
  5. Composition, placeholders and the missing documentation report

Run with:  python -m case_studies.switchgear.run [OUTPUT]
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import tempfile
from pathlib import Path

from cimrdfs.common import class_specific_attributes
from cimrdfs.composer import write_document
from cimrdfs.pipeline import PipelineConfig, build_context
from cimrdfs.store import StoreGateway

from .dataset import DESCRIPTIONS, INSTANCES


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def main() -> None:
    if len(sys.argv) > 1:
        output = Path(sys.argv[1])
    else:
        output = Path(tempfile.gettempdir()) / "GeneratedCIMRDFS.xml"

    config = PipelineConfig(
        sources=[INSTANCES],
        descriptions=DESCRIPTIONS,
        output=output,
    )

    with StoreGateway() as store:
        context = build_context(config, store)
        triples = len(store)

    print_header("Stage 1: Class-Instance Index")
    print(f"\n  {triples} triples loaded from {INSTANCES.name}")
    for class_name in context.index:
        instances = sorted(uri.rsplit("#", 1)[-1] for uri in context.index[class_name])
        print(f"    {class_name:<10} {', '.join(instances)}")

    print_header("Stage 2: Attribute Catalog")
    for class_name in context.catalog.classes():
        print(f"\n  {class_name}")
        for attr in sorted(context.catalog.attributes_of(class_name)):
            flag = " [enum]" if attr in context.catalog.enums else ""
            print(f"    - {attr}{flag}")
    for attr in context.catalog.enums:
        codes = ", ".join(sorted(context.catalog.enums.codes[attr]))
        print(f"\n  Enum '{attr}': {codes}")

    print_header("Stage 3: Common Attributes")
    print(f"\n  Class types: {', '.join(sorted(context.common.class_types))}")
    print(f"  Common:      {', '.join(sorted(context.common.common))}")
    print("  Class-specific:")
    for class_name, attr in class_specific_attributes(context.catalog, context.common):
        print(f"    {class_name}: {attr}")

    print_header("Stage 4: Authored Descriptions")
    print(f"\n  {len(context.descriptions)} descriptions in {DESCRIPTIONS.name}")
    for name in context.descriptions.names():
        print(f"    - {name}")

    print_header("Stage 5: Composition")
    document = context.compose()
    print(f"\n  Emitted elements ({len(document.elements)}):")
    for element in document.elements:
        source = "placeholder" if element.name in document.missing else "authored"
        print(f"    {element.role.value:<9} {element.name:<30} {source}")
    print()
    for line in document.missing.format().splitlines():
        print(f"  {line}")

    write_document(document, output)
    print(f"\n  RDFS file is generated: {output}")

    print(f"\n{'=' * 60}")
    print("  Switchgear Case Study Complete")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
