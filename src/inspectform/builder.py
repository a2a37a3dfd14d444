"""Form builder state and the reorder operation behind drag-and-drop.

The builder view keeps a :class:`BuilderState` per template being edited.
Pointer events are translated into the reducers below; each returns a new
state and never mutates its input. Hovering over an element while dragging
reorders immediately, so ``drag_index`` always tracks where the dragged
element currently sits rather than where the drag started.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Sequence, TypeVar

from inspectform.fields import FieldDescriptor

T = TypeVar("T")


def move_element(elements: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Move the item at ``from_index`` so that it ends up at ``to_index``."""
    size = len(elements)
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise IndexError(f"index {index} out of range for {size} elements")
    result = list(elements)
    if from_index == to_index:
        return result
    item = result.pop(from_index)
    result.insert(to_index, item)
    return result


@dataclass(frozen=True)
class BuilderState:
    form_name: str
    elements: tuple[FieldDescriptor, ...] = field(default_factory=tuple)
    drag_index: int | None = None
    dirty: bool = False
    # Order and dirty flag as they were when the current drag started.
    origin_elements: tuple[FieldDescriptor, ...] | None = None
    origin_dirty: bool = False

    @property
    def dragging(self) -> bool:
        return self.drag_index is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "formName": self.form_name,
            "elements": [element.to_dict() for element in self.elements],
            "dragIndex": self.drag_index,
            "dirty": self.dirty,
            "originElements": (
                None
                if self.origin_elements is None
                else [element.to_dict() for element in self.origin_elements]
            ),
            "originDirty": self.origin_dirty,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuilderState":
        origin = data.get("originElements")
        return cls(
            form_name=data["formName"],
            elements=tuple(FieldDescriptor.from_dict(item) for item in data.get("elements", [])),
            drag_index=data.get("dragIndex"),
            dirty=bool(data.get("dirty")),
            origin_elements=(
                None if origin is None else tuple(FieldDescriptor.from_dict(item) for item in origin)
            ),
            origin_dirty=bool(data.get("originDirty")),
        )


def start_drag(state: BuilderState, index: int) -> BuilderState:
    if not 0 <= index < len(state.elements):
        raise IndexError(f"index {index} out of range for {len(state.elements)} elements")
    return replace(
        state, drag_index=index, origin_elements=state.elements, origin_dirty=state.dirty
    )


def hover(state: BuilderState, target_index: int) -> BuilderState:
    if state.drag_index is None or state.drag_index == target_index:
        return state
    elements = move_element(state.elements, state.drag_index, target_index)
    return replace(state, elements=tuple(elements), drag_index=target_index, dirty=True)


def drop(state: BuilderState) -> BuilderState:
    return replace(state, drag_index=None, origin_elements=None, origin_dirty=False)


def cancel_drag(state: BuilderState) -> BuilderState:
    """Abort a drag and restore the order and dirty flag it started from."""
    if state.origin_elements is None:
        return replace(state, drag_index=None)
    return replace(
        state,
        elements=state.origin_elements,
        drag_index=None,
        dirty=state.origin_dirty,
        origin_elements=None,
        origin_dirty=False,
    )


def mark_saved(state: BuilderState) -> BuilderState:
    return replace(state, dirty=False)
