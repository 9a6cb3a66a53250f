import json
import sys

import pandas as pd

from scentdata import config as cfg
from scentdata.scripts import main as script


def fake_sources():
    leffingwell = pd.DataFrame({
        "molecule": ["CCO", "c1ccccc1", "CCCCC"],
        "leffingwell_odor": [["fish"], ["cherry maraschino cherry", "sweet"], ["cherry", "musk", "fish"]],
    })
    goodscents = pd.DataFrame({
        "molecule": ["CCO", "CCCC"],
        "goodscents_odor": [["sweet", "fishy"], ["odorless", "musk"]],
    })
    return leffingwell, goodscents


def test_main_writes_all_outputs(tmp_path, monkeypatch):
    leffingwell, goodscents = fake_sources()
    monkeypatch.setattr(script, "load_leffingwell", lambda commit, dense=False: leffingwell)
    monkeypatch.setattr(script, "load_goodscents", lambda commit: goodscents)

    config = {
        "output_dir": str(tmp_path),
        "commit": "abc123",
        "min_support": 2,
        "odorless_label": "odorless",
        "dense_leffingwell": False,
    }
    script.main(config)

    df = pd.read_csv(tmp_path / cfg.data_file)
    assert df.columns.tolist() == ["molecule", "cherry", "fish", "musk", "sweet"]
    assert df["molecule"].tolist() == ["CCO", "CCCC", "c1ccccc1", "CCCCC"]
    assert df.drop(columns="molecule").to_numpy().sum() == 8

    with open(tmp_path / cfg.key_file) as f:
        key = json.load(f)
    assert key["cherry"] == 0
    assert key["3"] == "sweet"

    with open(tmp_path / cfg.labels_file) as f:
        assert f.read().splitlines() == ["cherry", "fish", "musk", "sweet"]

    counts = pd.read_csv(tmp_path / cfg.counts_file)
    assert counts.columns.tolist() == ["odor", "# molecules"]
    assert counts["# molecules"].tolist() == [2, 2, 2, 2]


def test_cli_dense_flag(monkeypatch):
    seen = []
    monkeypatch.setattr(script, "main", seen.append)

    monkeypatch.setattr(sys, "argv", ["scentdata"])
    script.cli()
    monkeypatch.setattr(sys, "argv", ["scentdata", "--dense_leffingwell", "--min_support", "5"])
    script.cli()

    assert seen[0]["dense_leffingwell"] is False
    assert seen[0]["min_support"] == cfg.MIN_LABEL_SUPPORT
    assert seen[0]["commit"] == cfg.PYRFUME_COMMIT
    assert seen[1]["dense_leffingwell"] is True
    assert seen[1]["min_support"] == 5
