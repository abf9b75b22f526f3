"""Tests for backfill/lib/transform.py."""

import pytest

from backfill.lib.models import Record, WriteInstruction
from backfill.lib.transform import Transformer, transform, transform_all


class TestTransform:
    """Tests for single-record transformation."""

    @pytest.mark.parametrize("value", [None, "", " ", "\t\n  "])
    def test_blank_values_produce_nothing(self, value):
        assert transform(Record(id="a1", source_value=value), "categories") is None

    def test_value_becomes_single_element_set(self):
        instruction = transform(Record(id="a1", source_value="books"), "categories")
        assert instruction == WriteInstruction(id="a1", target_field="categories", values=("books",))

    def test_value_is_trimmed(self):
        instruction = transform(Record(id="a1", source_value="  home & garden \n"), "categories")
        assert instruction.values == ("home & garden",)

    def test_inner_whitespace_is_preserved(self):
        instruction = transform(Record(id="a1", source_value=" a  b "), "categories")
        assert instruction.values == ("a  b",)

    def test_non_ascii_value(self):
        instruction = transform(Record(id="a1", source_value=" Bücher "), "categories")
        assert instruction.values == ("Bücher",)


class TestTransformAll:
    """Tests for sequence transformation."""

    def test_preserves_order_and_drops_blanks(self):
        records = [
            Record(id="1", source_value="a"),
            Record(id="2", source_value="  "),
            Record(id="3", source_value="c"),
            Record(id="4", source_value=None),
            Record(id="5", source_value="e"),
        ]
        instructions = transform_all(records, "categories")
        assert [i.id for i in instructions] == ["1", "3", "5"]
        assert [i.values for i in instructions] == [("a",), ("c",), ("e",)]

    def test_empty_input(self):
        assert transform_all([], "categories") == []

    def test_transformer_class_binds_target_field(self):
        transformer = Transformer("tags")
        instruction = transformer.transform(Record(id="1", source_value="x"))
        assert instruction.target_field == "tags"
        assert len(transformer.transform_all([Record(id="1", source_value="x")] * 3)) == 3

    def test_transformer_carries_unique_key(self):
        instruction = Transformer("categories", unique_key="sku").transform(
            Record(id="A1", source_value="books")
        )
        assert instruction.to_update_doc() == {"sku": "A1", "categories": {"set": ["books"]}}
