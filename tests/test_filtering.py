import pytest

from scentdata.data.checks import InvariantViolation, check_min_support, check_nonempty_labels
from scentdata.data.processing import Entity, vocabulary
from scentdata.labels.filtering import filter_rare_labels, label_support


def make_table():
    table = []
    for i in range(30):
        labels = {"fruity", "green"} if i < 29 else {"fruity"}
        table.append(Entity(f"C{i}", frozenset(labels)))
    table.append(Entity("rare-only", frozenset({"rare"})))
    return table


def test_label_support():
    support = label_support(make_table())
    assert support == {"fruity": 30, "green": 29, "rare": 1}


def test_filter_rare_labels():
    out = filter_rare_labels(make_table(), threshold=30)
    assert len(out) == 30
    assert vocabulary(out) == {"fruity"}
    assert "rare-only" not in {e.molecule for e in out}
    assert all(len(e.labels) >= 1 for e in out)
    assert all(n >= 30 for n in label_support(out).values())


def test_filter_rare_labels_low_threshold_keeps_everything():
    table = make_table()
    assert filter_rare_labels(table, threshold=1) == table


def test_check_min_support_names_label():
    with pytest.raises(InvariantViolation, match="'green'"):
        check_min_support({"fruity": 30, "green": 29}, 30)


def test_check_nonempty_labels_names_molecule():
    with pytest.raises(InvariantViolation, match="'CCO'"):
        check_nonempty_labels([Entity("CCO", frozenset())])
