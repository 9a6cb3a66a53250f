import logging

import numpy as np
import pandas as pd
import pytest

from scentdata.data.checks import InvariantViolation
from scentdata.data.processing import (
    Entity,
    deduplicate,
    extract_labels,
    labels_from_indicators,
    merge_tables,
    split_bracketed,
    split_delimited,
    table_from_frame,
    vocabulary,
)


def test_split_delimited():
    assert split_delimited("a;b") == ["a", "b"]
    assert split_delimited("acetic; vinegar ;acetic") == ["acetic", "vinegar"]
    assert split_delimited("fresh  outdoors;;") == ["fresh outdoors"]


def test_split_delimited_missing_payload():
    assert split_delimited(np.nan) == []
    assert split_delimited(None) == []
    assert split_delimited("") == []


def test_split_bracketed():
    assert split_bracketed("['b', 'c']") == ["b", "c"]
    assert split_bracketed("['fruity', 'green', 'black currant']") == ["fruity", "green", "black currant"]
    assert split_bracketed("[]") == []
    assert split_bracketed(np.nan) == []


def test_split_bracketed_keeps_labels_with_apostrophes():
    assert split_bracketed("[\"baker's yeast\", 'sweet']") == ["baker's yeast", "sweet"]


def test_split_bracketed_malformed(caplog):
    with caplog.at_level(logging.WARNING):
        assert split_bracketed("['a', 'b'") == []
        assert split_bracketed("[fruity, green]") == []
        assert split_bracketed(123) == []
    assert "Malformed label list" in caplog.text
    assert "Unparseable label list" in caplog.text


def test_labels_from_indicators():
    row = {"molecule": "CCO", "fruity": 1, "green": 0, "sweet": 1, "waxy": np.nan}
    assert labels_from_indicators(row, ["fruity", "green", "sweet", "waxy"]) == ["fruity", "sweet"]


def test_extract_labels_shapes():
    df = pd.DataFrame({"molecule": ["CCO", "CCC"], "odor": ["a;b", np.nan]})
    out = extract_labels(df, "odor", shape="delimited")
    assert out["odor"].tolist() == [["a", "b"], []]

    df = pd.DataFrame({"molecule": ["CCO"], "odor": ["['b', 'c']"]})
    assert extract_labels(df, "odor", shape="bracketed")["odor"].tolist() == [["b", "c"]]

    df = pd.DataFrame({"molecule": ["CCO", "CCC"], "fruity": [1, 0], "green": [1, 1]})
    out = extract_labels(df, "odor", shape="indicators")
    assert out.columns.tolist() == ["molecule", "odor"]
    assert out["odor"].tolist() == [["fruity", "green"], ["green"]]


def test_extract_labels_unknown_shape():
    df = pd.DataFrame({"molecule": ["CCO"], "odor": ["a"]})
    with pytest.raises(ValueError):
        extract_labels(df, "odor", shape="json")


def test_table_from_frame_skips_missing_molecules():
    df = pd.DataFrame({"molecule": ["CCO", np.nan], "odor": [["a"], ["b"]]})
    assert table_from_frame(df, "odor") == [Entity("CCO", frozenset({"a"}))]


def test_deduplicate_merges_duplicate_rows():
    single = Entity("CCO", frozenset({"alcoholic"}))
    table = [
        Entity("C(=O)O", frozenset({"acetic", "vinegar", "pungent"})),
        single,
        Entity("C(=O)O", frozenset({"acetic", "fermented", "sharp", "fruity"})),
    ]
    out = deduplicate(table)
    assert len(out) == 2
    assert out[0] == Entity("C(=O)O", frozenset({"acetic", "vinegar", "pungent", "fermented", "sharp", "fruity"}))
    assert out[1] is single


def test_deduplicate_compares_molecules_exactly():
    table = [Entity("OCC", frozenset({"a"})), Entity("CCO", frozenset({"b"}))]
    assert len(deduplicate(table)) == 2


def test_merge_unions_shared_molecules():
    a = table_from_frame(extract_labels(pd.DataFrame({"molecule": ["X"], "odor": ["a;b"]}), "odor"), "odor")
    b = table_from_frame(
        extract_labels(pd.DataFrame({"molecule": ["X"], "odor": ["['b', 'c']"]}), "odor", shape="bracketed"), "odor"
    )
    assert merge_tables(a, b) == [Entity("X", frozenset({"a", "b", "c"}))]


def test_merge_is_a_full_outer_join():
    a = [Entity("X", frozenset({"a"})), Entity("Y", frozenset({"b"}))]
    b = [Entity("Z", frozenset({"c"})), Entity("X", frozenset())]
    merged = merge_tables(a, b)
    assert [e.molecule for e in merged] == ["X", "Y", "Z"]
    assert merged[0].labels == {"a"}
    assert merged[2].labels == {"c"}
    assert vocabulary(merged) == {"a", "b", "c"}


def test_merge_rejects_duplicate_input():
    a = [Entity("X", frozenset({"a"})), Entity("X", frozenset({"b"}))]
    with pytest.raises(InvariantViolation, match="'X'"):
        merge_tables(a, [])
