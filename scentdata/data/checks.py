from collections import Counter
from typing import Dict, Iterable, List, Mapping


class InvariantViolation(AssertionError):
    """Raised when a pipeline stage hands on a table that breaks a structural invariant."""

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"[{invariant}] {detail}")


def check_unique_entities(table, stage: str = ''):
    counts = Counter(entity.molecule for entity in table)
    repeated = [molecule for molecule, n in counts.items() if n > 1]
    if repeated:
        raise InvariantViolation(
            'unique molecules',
            f"{len(repeated)} molecule(s) appear more than once after {stage or 'this stage'}, e.g. {repeated[0]!r} x{counts[repeated[0]]}",
        )


def check_nonempty_labels(table, stage: str = ''):
    for entity in table:
        if len(entity.labels) == 0:
            raise InvariantViolation(
                'non-empty labels',
                f"molecule {entity.molecule!r} has no odor labels after {stage or 'this stage'}",
            )


def check_min_support(support: Mapping[str, int], threshold: int):
    for label, n in support.items():
        if n < threshold:
            raise InvariantViolation(
                'minimum label support',
                f"label {label!r} is carried by {n} molecule(s), below the threshold of {threshold}",
            )


def check_bijection(label_to_idx: Dict[str, int], idx_to_label: Dict[int, str]):
    if len(label_to_idx) != len(idx_to_label):
        raise InvariantViolation(
            'label index bijection',
            f"{len(label_to_idx)} labels but {len(idx_to_label)} indices",
        )
    for label, idx in label_to_idx.items():
        if idx_to_label.get(idx) != label:
            raise InvariantViolation(
                'label index bijection',
                f"label {label!r} maps to index {idx}, which maps back to {idx_to_label.get(idx)!r}",
            )


def check_conservation(molecules: List[str], set_sizes: Iterable[int], row_sums: Iterable[int]):
    total_labels = 0
    total_bits = 0
    for molecule, size, row_sum in zip(molecules, set_sizes, row_sums):
        if int(row_sum) != size:
            raise InvariantViolation(
                'encoding conservation',
                f"molecule {molecule!r} has {size} label(s) but its encoded row sums to {int(row_sum)}",
            )
        total_labels += size
        total_bits += int(row_sum)
    if total_labels != total_bits:
        raise InvariantViolation(
            'encoding conservation',
            f"{total_labels} label occurrences but the matrix sums to {total_bits}",
        )
