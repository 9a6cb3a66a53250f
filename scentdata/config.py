from dataclasses import dataclass, field
from typing import Dict, List



PYRFUME_COMMIT = '0e9652c4fde822ad4009d175feb4cfeb7e80d3f7' # most recent as of mid-February 2024
PYRFUME_URL = 'https://raw.githubusercontent.com/pyrfume/pyrfume-data/{commit}/{file}'

MIN_LABEL_SUPPORT = 30
ODORLESS_LABEL = 'odorless'

# low-information words that follow the label they qualify, e.g. "lemon peel"; matched as substrings
QUALIFIER_WORDS = [
    ' skin', ' peel', ' rind', ' leaf', ' needle', ' yolk', ' root', ' chip', ' flesh', ' seed', ' fat', ' juice', ' butter'
]

# marker substring -> canonical label
SYNONYM_FAMILIES = {
    'currant': 'currant',
}

MANUAL_SUBSTITUTIONS = {
    'concorde grape': 'grape',
    'concord grape': 'grape',
    'bread baked': 'bread',
}

output_dir = 'data/'
data_file = 'pyrfume.csv'
key_file = 'odor_key.json'
labels_file = 'odor_labels.txt'
counts_file = 'counts.csv'


@dataclass
class LabelConfig:
    min_support: int = MIN_LABEL_SUPPORT
    odorless_label: str = ODORLESS_LABEL
    qualifier_words: List[str] = field(default_factory=lambda: list(QUALIFIER_WORDS))
    synonym_families: Dict[str, str] = field(default_factory=lambda: dict(SYNONYM_FAMILIES))
    manual_substitutions: Dict[str, str] = field(default_factory=lambda: dict(MANUAL_SUBSTITUTIONS))

    def __post_init__(self):
        if self.min_support < 1:
            raise ValueError(f"min_support must be at least 1, got {self.min_support}")
        if not self.odorless_label.strip():
            raise ValueError("odorless_label must be a non-empty label")
