import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Mapping, Sequence

import pandas as pd
from tqdm import tqdm
tqdm.pandas()

from scentdata.data.checks import check_unique_entities


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entity:
    molecule: str
    labels: FrozenSet[str]


def normalize_label(label: str) -> str:
    return ' '.join(label.split())


def _is_missing(payload) -> bool:
    if payload is None or payload is pd.NA:
        return True
    if isinstance(payload, float) and pd.isna(payload):
        return True
    return False


def _unique_nonempty(labels: Iterable[str]) -> List[str]:
    seen = set()
    rv = []
    for label in labels:
        label = normalize_label(label)
        if label and label not in seen:
            seen.add(label)
            rv.append(label)
    return rv


def split_delimited(payload, delimiter: str = ';') -> List[str]:
    """
    Splits a delimiter-joined descriptor string, e.g. "acetic;vinegar;pungent".

    :param payload: The raw descriptor string for one molecule.
    :param delimiter: The separator between descriptors.
    :return: Deduplicated, whitespace-normalized labels. Missing payloads give an empty list.
    """
    if _is_missing(payload):
        return []
    if not isinstance(payload, str):
        logger.warning(f"Unparseable descriptor payload {payload!r}; treating as no labels")
        return []
    return _unique_nonempty(payload.split(delimiter))


QUOTED_ITEM = re.compile(r"'([^']*)'|\"([^\"]*)\"")


def split_bracketed(payload) -> List[str]:
    """
    Splits a list written out as a string, e.g. "['fruity', 'green', 'black currant']".

    Items are read between matching quotes; a label holding an apostrophe is written
    in double quotes, e.g. "[\"baker's yeast\", 'sweet']". Commas inside items are dropped.
    """
    if _is_missing(payload):
        return []
    if not isinstance(payload, str):
        logger.warning(f"Unparseable label list {payload!r}; treating as no labels")
        return []
    stripped = payload.strip()
    if not stripped:
        return []
    if not (stripped.startswith('[') and stripped.endswith(']')):
        logger.warning(f"Malformed label list {payload!r}; treating as no labels")
        return []
    inner = stripped[1:-1]
    items = [single or double for single, double in QUOTED_ITEM.findall(inner)]
    if not items and inner.strip():
        logger.warning(f"Malformed label list {payload!r}; treating as no labels")
        return []
    return _unique_nonempty(item.replace(',', '') for item in items)


def labels_from_indicators(row: Mapping, label_columns: Sequence[str]) -> List[str]:
    """Converts one bit-encoded row into the list of labels whose indicator is 1."""
    labels = []
    for column in label_columns:
        value = row[column]
        if _is_missing(value):
            continue
        if value == 1:
            labels.append(column)
    return _unique_nonempty(labels)


def extract_labels(df: pd.DataFrame, column: str, shape: str = 'delimited', delimiter: str = ';') -> pd.DataFrame:
    """
    Replaces the raw payload column with lists of atomic labels.

    :param df: Frame with a `molecule` column and the raw payload column.
    :param column: Name of the payload column. For shape 'indicators' this becomes the new column name
                   and every other non-molecule column is taken as an indicator column.
    :param shape: One of 'delimited', 'bracketed' or 'indicators'.
    """
    df = df.copy()
    if shape == 'delimited':
        df[column] = df[column].progress_apply(lambda x: split_delimited(x, delimiter))
    elif shape == 'bracketed':
        df[column] = df[column].progress_apply(split_bracketed)
    elif shape == 'indicators':
        label_columns = [c for c in df.columns if c != 'molecule']
        labels = [
            labels_from_indicators(row, label_columns)
            for _, row in tqdm(df.iterrows(), total=len(df), desc='Reading indicator columns')
        ]
        df = pd.DataFrame({'molecule': df['molecule'].tolist(), column: labels})
    else:
        raise ValueError(f"Unknown payload shape {shape!r}, expected 'delimited', 'bracketed' or 'indicators'")
    return df


def table_from_frame(df: pd.DataFrame, column: str) -> List[Entity]:
    """Turns an extracted frame into Entity records. Rows without a molecule are skipped."""
    table = []
    for molecule, labels in zip(df['molecule'], df[column]):
        if _is_missing(molecule):
            continue
        table.append(Entity(molecule, frozenset(labels)))
    return table


def deduplicate(table: List[Entity]) -> List[Entity]:
    """
    Merges rows that share a molecule string into one row carrying the union of their labels.
    Molecule strings are compared exactly.
    """
    groups = {}
    for entity in table:
        groups.setdefault(entity.molecule, []).append(entity)

    rv = []
    for molecule, group in groups.items():
        if len(group) == 1:
            rv.append(group[0])
        else:
            rv.append(Entity(molecule, frozenset().union(*(e.labels for e in group))))

    n_duplicated = sum(1 for group in groups.values() if len(group) > 1)
    logger.info(f"Merged {len(table)} rows into {len(rv)} molecules ({n_duplicated} had duplicate rows)")

    assert len(rv) == len(groups)
    check_unique_entities(rv, 'deduplication')
    return rv


def merge_tables(a: List[Entity], b: List[Entity]) -> List[Entity]:
    """
    Full outer join of two deduplicated tables on molecule. A molecule missing from one side
    contributes the empty set from that side, so every molecule gets the union of both.
    """
    check_unique_entities(a, 'deduplication (first table)')
    check_unique_entities(b, 'deduplication (second table)')

    b_labels = {e.molecule: e.labels for e in b}
    a_molecules = set()

    merged = []
    for entity in a:
        a_molecules.add(entity.molecule)
        merged.append(Entity(entity.molecule, entity.labels | b_labels.get(entity.molecule, frozenset())))
    for entity in b:
        if entity.molecule not in a_molecules:
            merged.append(Entity(entity.molecule, entity.labels))

    logger.info(f"Joined {len(a)} and {len(b)} molecules into {len(merged)} ({len(a) + len(b) - len(merged)} in common)")

    check_unique_entities(merged, 'merging')
    return merged


def vocabulary(table: List[Entity]) -> FrozenSet[str]:
    return frozenset().union(*(e.labels for e in table)) if table else frozenset()
