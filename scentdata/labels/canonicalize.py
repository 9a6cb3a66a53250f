"""
Collapses near-duplicate odor labels into one canonical form.

Each vocabulary rule is a pure function of the current vocabulary that returns the labels it
rewrites (raw -> replacement). The rules run in the order of CANONICALIZATION_RULES, each one
seeing the vocabulary as reshaped by the rules before it, and are composed into a single
raw -> canonical mapping that is then applied to every molecule. One pass, no fixed point.

Removing the "odorless" label from molecules that also carry a real descriptor happens first,
per molecule, since it depends on which labels co-occur rather than on the label text.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from tqdm import tqdm

from scentdata.config import LabelConfig
from scentdata.data.processing import Entity, vocabulary


logger = logging.getLogger(__name__)


def resolve_contradictions(table: List[Entity], odorless_label: str) -> List[Entity]:
    rv = []
    n_resolved = 0
    for entity in table:
        if odorless_label in entity.labels and len(entity.labels) > 1:
            rv.append(Entity(entity.molecule, entity.labels - {odorless_label}))
            n_resolved += 1
        else:
            rv.append(entity)
    logger.info(f"Dropped '{odorless_label}' from {n_resolved} molecules that also carry another label")
    return rv


def is_aba(label: str) -> bool:
    tokens = label.split()
    return len(tokens) == 3 and tokens[0] == tokens[2]


def build_aba_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    """"cherry maraschino cherry" -> "cherry"."""
    return {label: label.split()[0] for label in labels if is_aba(label)}


def is_cheesy_cheese(label: str) -> bool:
    tokens = label.split()
    return len(tokens) == 3 and tokens[0] == 'cheesy' and tokens[2] == 'cheese'


def build_cheese_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    """"cheesy parmesan cheese" -> "cheesy"."""
    return {label: 'cheesy' for label in labels if is_cheesy_cheese(label)}


def strip_qualifier(label: str, qualifier_words: Iterable[str]) -> str:
    """
    Removes the first qualifier (in list order) found in the label, e.g. "lemon peel" -> "lemon".
    Qualifiers are plain substrings carrying a leading space, so one never matches the first word.
    """
    for word in qualifier_words:
        if word in label:
            return ' '.join(label.replace(word, '').split())
    return label


def build_qualifier_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    rv = {}
    for label in labels:
        stripped = strip_qualifier(label, config.qualifier_words)
        if stripped != label:
            rv[label] = stripped
    return rv


def build_synonym_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    """Every label containing a family marker, e.g. "black currant", "currant bud", -> the family label."""
    rv = {}
    for label in labels:
        for marker, canonical in config.synonym_families.items():
            if marker in label:
                if label != canonical:
                    rv[label] = canonical
                break
    return rv


def build_noun_adjective_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    """"fishy" -> "fish", but only when "fish" is also in the vocabulary."""
    return {
        label: label[:-1]
        for label in labels
        if len(label) > 1 and label.endswith('y') and label[:-1] in labels
    }


def build_manual_rule(labels: Set[str], config: LabelConfig) -> Dict[str, str]:
    return {raw: replacement for raw, replacement in config.manual_substitutions.items() if raw in labels}


CANONICALIZATION_RULES: List[Tuple[str, Callable[[Set[str], LabelConfig], Dict[str, str]]]] = [
    ('ABA collapse', build_aba_rule),
    ('cheese collapse', build_cheese_rule),
    ('qualifier stripping', build_qualifier_rule),
    ('synonym families', build_synonym_rule),
    ('noun/adjective unification', build_noun_adjective_rule),
    ('manual substitutions', build_manual_rule),
]


def build_rules(labels: Iterable[str], config: Optional[LabelConfig] = None) -> Dict[str, str]:
    """
    Runs every rule over the vocabulary in order and composes the results.

    :param labels: The vocabulary to canonicalize.
    :param config: Qualifier words, synonym families and manual substitutions.
    :return: raw label -> canonical label, for every label that changes.
    """
    config = config or LabelConfig()
    mapping = {label: label for label in labels}
    current = set(mapping)

    for name, rule in CANONICALIZATION_RULES:
        step = rule(current, config)
        for raw, replacement in sorted(step.items()):
            logger.debug(f"{name}: {raw} => {replacement}")
        for raw in mapping:
            mapping[raw] = step.get(mapping[raw], mapping[raw])
        current = {step.get(label, label) for label in current}
        logger.info(f"{name}: rewrote {len(step)} labels, vocabulary now {len(current)}")

    unresolved = sorted(raw for raw, label in mapping.items() if has_repeated_word(label))
    if unresolved:
        logger.warning(f"Labels with a repeated word not collapsed by the ABA rule: {unresolved}")

    return {raw: label for raw, label in mapping.items() if raw != label}


def has_repeated_word(label: str) -> bool:
    tokens = label.split()
    return len(set(tokens)) < len(tokens)


def canonicalize(label: str, mapping: Dict[str, str]) -> str:
    return mapping.get(label, label)


def apply_rules(table: List[Entity], mapping: Dict[str, str]) -> List[Entity]:
    return [
        Entity(entity.molecule, frozenset(canonicalize(label, mapping) for label in entity.labels))
        for entity in tqdm(table, desc='Rewriting labels')
    ]


def canonicalize_table(table: List[Entity], config: Optional[LabelConfig] = None) -> List[Entity]:
    config = config or LabelConfig()
    table = resolve_contradictions(table, config.odorless_label)
    mapping = build_rules(vocabulary(table), config)
    table = apply_rules(table, mapping)
    logger.info(f"Canonicalized vocabulary to {len(vocabulary(table))} labels")
    return table
