"""Common-Attribute Extractor — splits attribute names into common and
class-specific.

Promotion rule: an attribute name observed under at least `threshold`
distinct class types (default 2) is common. Every catalogued class type is a
member of the class-type set.
"""

from __future__ import annotations

import logging

from .types import AttributeCatalog, CommonAttributes

logger = logging.getLogger(__name__)

DEFAULT_COMMON_THRESHOLD = 2


def extract_common_attributes(
    catalog: AttributeCatalog,
    threshold: int = DEFAULT_COMMON_THRESHOLD,
) -> CommonAttributes:
    if threshold < 1:
        raise ValueError(f"Common attribute threshold must be >= 1, got {threshold}")

    occurrences: dict[str, int] = {}
    for attrs in catalog.attributes.values():
        for attr in attrs:
            occurrences[attr] = occurrences.get(attr, 0) + 1

    common = frozenset(attr for attr, count in occurrences.items() if count >= threshold)
    result = CommonAttributes(class_types=frozenset(catalog.attributes), common=common)
    logger.info(
        "%d class types, %d common attributes (threshold %d)",
        len(result.class_types), len(common), threshold,
    )
    return result


def class_specific_attributes(
    catalog: AttributeCatalog,
    common: CommonAttributes,
) -> list[tuple[str, str]]:
    """Sorted (class name, attribute name) pairs that were not promoted."""
    return sorted(
        (class_name, attr)
        for class_name, attrs in catalog.attributes.items()
        for attr in attrs
        if attr not in common.common
    )
