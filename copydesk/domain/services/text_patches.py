"""
Raw text patches: the low-level fallback of the AI edit layer.

A patch is an ordered list of retain/delete/insert operations walked by a
cursor over the ORIGINAL text, optionally starting at the first occurrence
of an anchor string:

    retain n   copy the next n original characters
    delete n   skip the next n original characters
    insert s   emit s (the original cursor does not move)

Everything after the last operation is kept. Offsets are resolved in one
pass against the original text, so an insert or delete never shifts the
coordinates of later operations in the same batch. A missing anchor or an
operation running past the end of the text fails the whole patch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from copydesk.domain.models.errors import PatchApplicationError


class PatchType(str, Enum):
    RETAIN = "retain"
    DELETE = "delete"
    INSERT = "insert"


@dataclass(frozen=True)
class PatchOperation:
    type: PatchType
    length: Optional[int] = None
    value: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "type", PatchType(self.type))
        if self.length is not None and self.length < 0:
            raise PatchApplicationError(f"{self.type.value} length must be >= 0")

    @classmethod
    def retain(cls, length: int) -> "PatchOperation":
        return cls(type=PatchType.RETAIN, length=length)

    @classmethod
    def delete(cls, length: int) -> "PatchOperation":
        return cls(type=PatchType.DELETE, length=length)

    @classmethod
    def insert(cls, value: str) -> "PatchOperation":
        return cls(type=PatchType.INSERT, value=value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatchOperation":
        return cls(type=data["type"], length=data.get("length"), value=data.get("value"))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value}
        if self.length is not None:
            result["length"] = self.length
        if self.value is not None:
            result["value"] = self.value
        return result


@dataclass(frozen=True)
class TextPatch:
    """A batch of operations, optionally anchored on target_text."""
    operations: Tuple[PatchOperation, ...] = field(default_factory=tuple)
    target_text: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.operations, tuple):
            object.__setattr__(self, "operations", tuple(self.operations))


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Step:
    op: PatchOperation
    start: int
    end: int


def _anchor_offset(text: str, target_text: Optional[str]) -> int:
    if not target_text:
        return 0
    index = text.find(target_text)
    if index == -1:
        raise PatchApplicationError(f"Target text not found: {target_text!r}")
    return index


def _plan(text: str, patch: TextPatch) -> Tuple[int, List[_Step], int]:
    """
    Resolve every operation to original-text offsets before applying any.

    Returns (anchor, steps, final_cursor).
    """
    anchor = _anchor_offset(text, patch.target_text)
    cursor = anchor
    steps: List[_Step] = []

    for op in patch.operations:
        if op.type == PatchType.INSERT:
            steps.append(_Step(op, cursor, cursor))
            continue

        length = op.length or 0
        end = cursor + length
        if end > len(text):
            raise PatchApplicationError(
                f"{op.type.value} of {length} at offset {cursor} runs past end of text ({len(text)})"
            )
        steps.append(_Step(op, cursor, end))
        cursor = end

    return anchor, steps, cursor


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------

def apply_patch(text: str, patch: TextPatch) -> str:
    """Apply a patch. Raises PatchApplicationError with text left untouched."""
    anchor, steps, cursor = _plan(text, patch)

    out: List[str] = [text[:anchor]]
    for step in steps:
        if step.op.type == PatchType.RETAIN:
            out.append(text[step.start:step.end])
        elif step.op.type == PatchType.INSERT:
            out.append(step.op.value or "")
        # DELETE emits nothing
    out.append(text[cursor:])
    return "".join(out)


def try_apply_patch(text: str, patch: TextPatch) -> Tuple[bool, str]:
    """(applied, text). On failure the original text is returned."""
    try:
        return True, apply_patch(text, patch)
    except PatchApplicationError:
        return False, text


def iter_patch_states(text: str, patch: TextPatch) -> Iterator[str]:
    """
    Yield successive document states while a patch is applied.

    One state per inserted character and one per retain/delete, so a UI can
    animate the edit at its own pace. The last state equals apply_patch().
    The whole patch is planned up front, so a failing patch raises before
    anything is yielded.
    """
    anchor, steps, cursor = _plan(text, patch)

    done = text[:anchor]
    yielded = False
    for step in steps:
        if step.op.type == PatchType.INSERT:
            for char in step.op.value or "":
                done += char
                yielded = True
                yield done + text[step.start:]
        else:
            if step.op.type == PatchType.RETAIN:
                done += text[step.start:step.end]
            yielded = True
            yield done + text[step.end:]

    if not yielded:
        yield done + text[cursor:]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def create_replace_patches(
    current_content: str,
    target_text: str,
    replacement_text: str,
) -> List[PatchOperation]:
    """
    Operations replacing the first occurrence of target_text.

    Returns an empty list when the target is absent.
    """
    index = current_content.find(target_text)
    if not target_text or index == -1:
        return []

    operations: List[PatchOperation] = []
    if index > 0:
        operations.append(PatchOperation.retain(index))
    operations.append(PatchOperation.delete(len(target_text)))
    if replacement_text:
        operations.append(PatchOperation.insert(replacement_text))
    return operations
