"""Tests for lucy.annotation: Annotation records and the Annotation Table."""

from lucy.annotation import KIND_FUNCTION, Annotation, AnnotationTable

# ---------------------------------------------------------------------------
# Annotation dataclass
# ---------------------------------------------------------------------------


class TestAnnotationDataclass:
    def test_defaults(self) -> None:
        ann = Annotation()
        assert ann.name == ""
        assert ann.kind == KIND_FUNCTION
        assert ann.is_removed is False
        assert ann.args == []
        assert ann.arg_count == 0
        assert ann.condition is None
        assert ann.target is None

    def test_arg_count_follows_args(self) -> None:
        ann = Annotation(name="Test", args=["a", "b"])
        assert ann.arg_count == 2

    def test_to_dict(self) -> None:
        ann = Annotation(
            name="When",
            target_name="f",
            args=["TARGET_TEST"],
            condition="TARGET_TEST",
        )
        d = ann.to_dict()
        assert d == {
            "name": "When",
            "target_name": "f",
            "kind": "function",
            "is_removed": False,
            "args": ["TARGET_TEST"],
            "arg_count": 1,
            "condition": "TARGET_TEST",
        }
        assert "target" not in d

    def test_from_dict_restores_fields(self) -> None:
        ann = Annotation(
            name="Disable",
            target_name="g",
            args=["flaky"],
            condition="__LUCY_TEST_DISABLE__",
            is_removed=True,
        )
        assert Annotation.from_dict(ann.to_dict()) == ann

    def test_from_dict_tolerates_missing_keys(self) -> None:
        ann = Annotation.from_dict({"name": "Setup"})
        assert ann.name == "Setup"
        assert ann.args == []
        assert ann.condition is None

    def test_target_not_compared(self) -> None:
        assert Annotation(name="T", target=print) == Annotation(name="T")


# ---------------------------------------------------------------------------
# AnnotationTable
# ---------------------------------------------------------------------------


class TestAnnotationTable:
    def test_preserves_insertion_order(self) -> None:
        table = AnnotationTable()
        for name in ("a", "b", "c"):
            table.add(Annotation(name="Test", target_name=name))
        assert [e.target_name for e in table] == ["a", "b", "c"]
        assert table[1].target_name == "b"

    def test_capacity_exceeded_signal(self) -> None:
        table = AnnotationTable(capacity=2)
        assert table.add(Annotation(name="A"))
        assert table.add(Annotation(name="B"))
        assert not table.add(Annotation(name="C"))
        assert len(table) == 2
        assert table.dropped == 1
        assert table.full

    def test_snapshot_is_detached(self) -> None:
        table = AnnotationTable()
        table.add(Annotation(name="Test"))
        snap = table.snapshot()
        table.add(Annotation(name="Test"))
        assert len(snap) == 1
        assert len(table) == 2

    def test_clear(self) -> None:
        table = AnnotationTable(capacity=1)
        table.add(Annotation(name="A"))
        table.add(Annotation(name="B"))
        table.clear()
        assert len(table) == 0
        assert table.dropped == 0
        assert table.snapshot() == ()
