import logging
from collections import Counter
from typing import List

from scentdata.config import MIN_LABEL_SUPPORT
from scentdata.data.checks import check_min_support, check_nonempty_labels, check_unique_entities
from scentdata.data.processing import Entity


logger = logging.getLogger(__name__)


def label_support(table: List[Entity]) -> Counter:
    """Number of molecules carrying each label."""
    counts = Counter()
    for entity in table:
        counts.update(entity.labels)
    return counts


def filter_rare_labels(table: List[Entity], threshold: int = MIN_LABEL_SUPPORT) -> List[Entity]:
    """
    Drops every label carried by fewer than `threshold` molecules, then every molecule
    left without labels.
    """
    support = label_support(table)
    rare = {label for label, n in support.items() if n < threshold}
    logger.info(f"{len(rare)} of {len(support)} labels have fewer than {threshold} molecules")

    trimmed = [Entity(e.molecule, e.labels - rare) for e in table]
    rv = [e for e in trimmed if len(e.labels) > 0]
    logger.info(f"Removed {len(trimmed) - len(rv)} molecules with no labels left, {len(rv)} remain")

    check_unique_entities(rv, 'frequency filtering')
    check_nonempty_labels(rv, 'frequency filtering')
    check_min_support(label_support(rv), threshold)
    return rv
