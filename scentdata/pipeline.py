import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from scentdata.config import LabelConfig
from scentdata.data.checks import check_unique_entities
from scentdata.data.processing import Entity, deduplicate, merge_tables, table_from_frame, vocabulary
from scentdata.labels.canonicalize import canonicalize_table
from scentdata.labels.filtering import filter_rare_labels, label_support
from scentdata.labels.label_tokenizer import LabelTokenizer


logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    table: List[Entity]
    tokenizer: LabelTokenizer
    matrix: np.ndarray
    stats: List[dict] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        return self.tokenizer.to_frame(self.table, self.matrix)


def _record(stats, stage, table):
    check_unique_entities(table, stage)
    stats.append({'stage': stage, '# molecules': len(table), '# labels': len(vocabulary(table))})
    logger.info(f"{stage}: {len(table)} molecules, {len(vocabulary(table))} labels")


def run_pipeline(
    leffingwell: pd.DataFrame,
    goodscents: pd.DataFrame,
    config: Optional[LabelConfig] = None,
    leffingwell_column: str = 'leffingwell_odor',
    goodscents_column: str = 'goodscents_odor',
) -> PipelineResult:
    """
    Runs the stages below in order on two extracted frames (molecule + list of labels).

        1. deduplicate each source
        2. outer join the sources on molecule
        3. canonicalize labels
        4. drop rare labels and the molecules they leave empty
        5. freeze the vocabulary and encode
    """
    config = config or LabelConfig()
    stats = []

    leffingwell_table = deduplicate(table_from_frame(leffingwell, leffingwell_column))
    _record(stats, 'leffingwell', leffingwell_table)
    goodscents_table = deduplicate(table_from_frame(goodscents, goodscents_column))
    _record(stats, 'goodscents', goodscents_table)

    table = merge_tables(goodscents_table, leffingwell_table)
    _record(stats, 'merged', table)

    table = canonicalize_table(table, config)
    _record(stats, 'canonicalized', table)

    table = filter_rare_labels(table, config.min_support)
    _record(stats, 'filtered', table)

    tokenizer = LabelTokenizer.from_table(table)
    matrix = tokenizer.encode_table(table)

    return PipelineResult(table, tokenizer, matrix, stats)


def labels_per_molecule(table: List[Entity]) -> pd.DataFrame:
    """How many molecules carry 1, 2, ... labels."""
    counts = pd.Series([len(e.labels) for e in table], dtype=int).value_counts().sort_index()
    return pd.DataFrame({'# odor labels': counts.index.astype(int), '# molecules': counts.values})


def label_prevalence(table: List[Entity]) -> pd.DataFrame:
    """Molecules per label, most common first."""
    support = label_support(table)
    df = pd.DataFrame(sorted(support.items()), columns=['odor', '# molecules'])
    return df.sort_values('# molecules', ascending=False, kind='stable').reset_index(drop=True)
