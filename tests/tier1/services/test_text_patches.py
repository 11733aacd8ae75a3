"""
Tier-1 tests for text_patches.py.

retain/delete/insert patches resolved against the original text.
"""

import pytest

from copydesk.domain.models.errors import PatchApplicationError
from copydesk.domain.services.text_patches import (
    PatchOperation,
    PatchType,
    TextPatch,
    apply_patch,
    create_replace_patches,
    iter_patch_states,
    try_apply_patch,
)


retain = PatchOperation.retain
delete = PatchOperation.delete
insert = PatchOperation.insert


class TestApplyPatch:

    def test_replace_in_middle(self):
        patch = TextPatch([retain(6), delete(5), insert("there")])
        assert apply_patch("Hello world!", patch) == "Hello there!"

    def test_remainder_after_last_op_is_kept(self):
        assert apply_patch("abcdef", TextPatch([retain(2), insert("X")])) == "abXcdef"

    def test_empty_patch_is_identity(self):
        assert apply_patch("unchanged", TextPatch()) == "unchanged"

    def test_anchor_on_target_text(self):
        patch = TextPatch([delete(4), insert("Sale")], target_text="Deal")
        assert apply_patch("Big Deal today", patch) == "Big Sale today"

    def test_anchor_uses_first_occurrence(self):
        patch = TextPatch([delete(1), insert("X")], target_text="a")
        assert apply_patch("banana", patch) == "bXnana"

    def test_offsets_use_original_coordinates(self):
        """An insert does not shift the positions of later operations."""
        patch = TextPatch([insert(">>"), retain(3), delete(3), insert("XYZ")])
        assert apply_patch("abcdefgh", patch) == ">>abcXYZgh"

    def test_delete_then_retain_in_original_coordinates(self):
        patch = TextPatch([delete(2), retain(2), delete(2)])
        assert apply_patch("aabbccdd", patch) == "bbdd"

    def test_missing_anchor_raises(self):
        patch = TextPatch([insert("x")], target_text="missing")
        with pytest.raises(PatchApplicationError):
            apply_patch("some text", patch)

    def test_retain_past_end_raises(self):
        with pytest.raises(PatchApplicationError):
            apply_patch("short", TextPatch([retain(10)]))

    def test_delete_past_end_after_anchor_raises(self):
        patch = TextPatch([delete(10)], target_text="end")
        with pytest.raises(PatchApplicationError):
            apply_patch("the end", patch)

    def test_later_failure_means_no_partial_application(self):
        text = "abc"
        ok, result = try_apply_patch(text, TextPatch([insert("X"), retain(5)]))
        assert ok is False
        assert result == text

    def test_try_apply_success(self):
        assert try_apply_patch("abc", TextPatch([retain(1), delete(1)])) == (True, "ac")

    def test_negative_length_rejected(self):
        with pytest.raises(PatchApplicationError):
            PatchOperation.retain(-1)


class TestPatchOperation:

    def test_from_dict_to_dict(self):
        data = {"type": "insert", "value": "hi"}
        op = PatchOperation.from_dict(data)
        assert op.type is PatchType.INSERT
        assert op.to_dict() == data

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            PatchOperation.from_dict({"type": "swap", "length": 1})


class TestIterPatchStates:

    def test_final_state_matches_apply(self):
        patch = TextPatch([retain(6), delete(5), insert("there")])
        states = list(iter_patch_states("Hello world!", patch))
        assert states[-1] == apply_patch("Hello world!", patch)

    def test_one_state_per_inserted_character(self):
        states = list(iter_patch_states("ab", TextPatch([retain(1), insert("XY")])))
        assert states == ["ab", "aXb", "aXYb"]

    def test_delete_yields_state_without_deleted_text(self):
        states = list(iter_patch_states("abcd", TextPatch([retain(1), delete(2)])))
        assert states == ["abcd", "ad"]

    def test_empty_patch_yields_final_state(self):
        assert list(iter_patch_states("same", TextPatch())) == ["same"]

    def test_failing_patch_raises_before_yielding(self):
        states = iter_patch_states("abc", TextPatch([insert("X"), retain(9)]))
        with pytest.raises(PatchApplicationError):
            next(states)


class TestCreateReplacePatches:

    def test_builds_retain_delete_insert(self):
        ops = create_replace_patches("Hello world", "world", "there")
        assert ops == [retain(6), delete(5), insert("there")]
        assert apply_patch("Hello world", TextPatch(ops)) == "Hello there"

    def test_target_at_start_has_no_retain(self):
        assert create_replace_patches("Hello", "Hello", "Hi") == [delete(5), insert("Hi")]

    def test_empty_replacement_is_delete_only(self):
        assert create_replace_patches("a-b", "-", "") == [retain(1), delete(1)]

    def test_absent_target_gives_no_operations(self):
        assert create_replace_patches("Hello", "bye", "x") == []
