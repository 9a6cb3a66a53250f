import json
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd
from sklearn.preprocessing import MultiLabelBinarizer

from scentdata.data.checks import check_bijection, check_conservation
from scentdata.data.processing import Entity, vocabulary


class LabelTokenizer:
    def __init__(self, start_idx=0):
        """
        Initializes the LabelTokenizer.
        """
        self.start_idx = start_idx
        self.label_to_idx = {}
        self.idx_to_label = {}

    def __len__(self):
        return len(self.label_to_idx)

    def __contains__(self, label):
        return label in self.label_to_idx

    @classmethod
    def from_table(cls, table: List[Entity], start_idx=0):
        """Freezes the vocabulary of `table` in sorted order."""
        tokenizer = cls(start_idx)
        for label in sorted(vocabulary(table)):
            tokenizer.add_label(label)
        return tokenizer

    def add_label(self, label: str):
        if label not in self.label_to_idx:
            self.label_to_idx[label] = self.start_idx + len(self.label_to_idx)
        if self.label_to_idx[label] not in self.idx_to_label:
            self.idx_to_label[self.label_to_idx[label]] = label

    @property
    def labels(self) -> List[str]:
        """Labels in index order."""
        return [self.idx_to_label[i] for i in sorted(self.idx_to_label)]

    def get_idx(self, label: str) -> int:
        """
        Looks up the index of a label.

        Args:
            label (str): An odor label from the frozen vocabulary.

        Returns:
            int: Its index.
        """
        return self.label_to_idx[label]

    def get_label(self, idx: int) -> str:
        return self.idx_to_label[idx]

    def encode(self, labels: Iterable[str]) -> np.ndarray:
        vector = np.zeros(len(self), dtype=int)
        for label in labels:
            vector[self.get_idx(label) - self.start_idx] = 1
        return vector

    def decode(self, vector) -> List[str]:
        return [self.get_label(int(i) + self.start_idx) for i in np.flatnonzero(vector)]

    def encode_table(self, table: List[Entity]) -> np.ndarray:
        """
        Builds the molecule x label incidence matrix, columns in index order.
        Every row must sum to its molecule's label count.
        """
        check_bijection(self.label_to_idx, self.idx_to_label)
        if len(table) == 0:
            matrix = np.zeros((0, len(self)), dtype=int)
        else:
            mlb = MultiLabelBinarizer(classes=self.labels)
            matrix = mlb.fit_transform([sorted(e.labels) for e in table])
        check_conservation(
            [e.molecule for e in table],
            [len(e.labels) for e in table],
            matrix.sum(axis=1),
        )
        return matrix

    def to_frame(self, table: List[Entity], matrix: np.ndarray) -> pd.DataFrame:
        df = pd.DataFrame(matrix, columns=self.labels)
        df.insert(0, 'molecule', [e.molecule for e in table])
        return df

    def to_json(self) -> Dict[str, object]:
        """Both directions in one object: label -> index and str(index) -> label."""
        key = dict(self.label_to_idx)
        for idx, label in self.idx_to_label.items():
            if str(idx) in key:
                raise ValueError(f"Label {str(idx)!r} collides with the string form of index {idx}")
            key[str(idx)] = label
        return key

    def save(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.to_json(), f)

    @classmethod
    def from_json(cls, key: Dict[str, object]):
        label_to_idx = {label: idx for label, idx in key.items() if isinstance(idx, int)}
        start_idx = min(label_to_idx.values()) if label_to_idx else 0
        tokenizer = cls(start_idx)
        for label, idx in sorted(label_to_idx.items(), key=lambda x: x[1]):
            tokenizer.label_to_idx[label] = idx
            tokenizer.idx_to_label[idx] = label
        check_bijection(tokenizer.label_to_idx, tokenizer.idx_to_label)
        for label, idx in label_to_idx.items():
            if key.get(str(idx)) != label:
                raise ValueError(f"Index {idx} is missing from the key or does not map back to {label!r}")
        return tokenizer

    @classmethod
    def load(cls, path: str):
        with open(path) as f:
            return cls.from_json(json.load(f))
