"""
Downloads the Leffingwell and Goodscents tables from the pyrfume-data repository at a fixed commit
and joins each into a frame of (molecule, raw odor payload).

pyrfume has an API for the latest data but not for a given commit, so files are fetched from GitHub.
"""
import logging

import pandas as pd
from datasets import load_dataset

from scentdata.config import PYRFUME_COMMIT, PYRFUME_URL
from scentdata.data.processing import extract_labels


logger = logging.getLogger(__name__)

NON_LABEL_COLUMNS = ('Stimulus', 'CID', 'IsomericSMILES', 'molecule')


def get_raw_data(file, commit=PYRFUME_COMMIT):
    assert file.endswith('.csv'), f"expected a CSV file, got {file}"
    url = PYRFUME_URL.format(commit=commit, file=file)
    logger.info(f"Loading {url}")
    dataset = load_dataset('csv', data_files=url, split='train')
    return dataset.to_pandas()


def join_leffingwell(behavior: pd.DataFrame, stimuli: pd.DataFrame) -> pd.DataFrame:
    """Links each Leffingwell stimulus to its SMILES; labels stay in their raw "['a', 'b']" form."""
    df = pd.merge(behavior, stimuli, on='Stimulus', how='outer')
    df = df[['IsomericSMILES', 'Labels']].rename(columns={'IsomericSMILES': 'molecule', 'Labels': 'leffingwell_odor'})
    return df.dropna(subset=['molecule']).reset_index(drop=True)


def join_leffingwell_dense(behavior: pd.DataFrame, stimuli: pd.DataFrame = None) -> pd.DataFrame:
    """The bit-encoded Leffingwell table: molecule plus one 0/1 column per label."""
    if 'IsomericSMILES' not in behavior.columns:
        if stimuli is None:
            raise ValueError("behavior table has no IsomericSMILES column and no stimuli table was given")
        behavior = pd.merge(behavior, stimuli[['Stimulus', 'IsomericSMILES']], on='Stimulus', how='inner')
    label_columns = [c for c in behavior.columns if c not in NON_LABEL_COLUMNS]
    df = behavior[['IsomericSMILES'] + label_columns].rename(columns={'IsomericSMILES': 'molecule'})
    return df.dropna(subset=['molecule']).reset_index(drop=True)


def join_goodscents(behavior: pd.DataFrame, stimuli: pd.DataFrame, molecules: pd.DataFrame) -> pd.DataFrame:
    """Behavior -> stimuli on Stimulus, then stimuli -> molecules on CID; rows missing either field are dropped."""
    df = pd.merge(behavior, stimuli, on='Stimulus', how='outer')
    df = pd.merge(df, molecules, on='CID', how='inner')
    df = df[['IsomericSMILES', 'Descriptors']].rename(columns={'IsomericSMILES': 'molecule', 'Descriptors': 'goodscents_odor'})
    return df.dropna().reset_index(drop=True)


def load_leffingwell(commit=PYRFUME_COMMIT, dense=False) -> pd.DataFrame:
    stimuli = get_raw_data('leffingwell/stimuli.csv', commit)
    if dense:
        df = join_leffingwell_dense(get_raw_data('leffingwell/behavior.csv', commit), stimuli)
        return extract_labels(df, 'leffingwell_odor', shape='indicators')
    df = join_leffingwell(get_raw_data('leffingwell/behavior_sparse.csv', commit), stimuli)
    return extract_labels(df, 'leffingwell_odor', shape='bracketed')


def load_goodscents(commit=PYRFUME_COMMIT) -> pd.DataFrame:
    df = join_goodscents(
        get_raw_data('goodscents/behavior.csv', commit),
        get_raw_data('goodscents/stimuli.csv', commit),
        get_raw_data('goodscents/molecules.csv', commit),
    )
    return extract_labels(df, 'goodscents_odor', shape='delimited', delimiter=';')
