"""Pointer-driven drag state machine for the floating action control."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from barcode_wallet.bounds import Position, Rect, clamp_position
from barcode_wallet.position_store import PositionPersistence

_DRAG_LOGGER = logging.getLogger("BarcodeWallet.Drag")


class DragState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerEvent:
    pointer_id: int
    client_x: float
    client_y: float


class GeometryProvider(Protocol):
    """What the drag engine needs from the rendering layer."""

    def container_rect(self) -> Optional[Rect]:
        ...

    def element_rect(self) -> Optional[Rect]:
        ...

    def capture_pointer(self, pointer_id: int) -> None:
        ...

    def release_pointer(self, pointer_id: int) -> None:
        ...


class DragController:
    """Two-state (idle/dragging) controller for one floating element.

    Every path that leaves ``DRAGGING`` goes through ``_finish_gesture`` so
    pointer capture is always paired with a release. Only a gesture that
    actually moved persists its position and swallows the click that
    follows it.
    """

    def __init__(
        self,
        geometry: GeometryProvider,
        persistence: PositionPersistence,
        *,
        default_position: Optional[Position] = None,
        on_change: Optional[Callable[[Position], None]] = None,
    ) -> None:
        self._geometry = geometry
        self._persistence = persistence
        self._default_position = default_position
        self._on_change = on_change
        self._state = DragState.IDLE
        self._position: Optional[Position] = None
        self._grab_offset = Position(0, 0)
        self._pointer_id: Optional[int] = None
        self._moved = False
        self._suppress_next_click = False

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def position(self) -> Optional[Position]:
        return self._position

    @property
    def is_dragging(self) -> bool:
        return self._state is DragState.DRAGGING

    # Geometry ------------------------------------------------------------

    def _clamp(self, candidate: Position) -> Position:
        container = self._geometry.container_rect()
        element = self._geometry.element_rect()
        return clamp_position(
            candidate,
            container.size if container is not None else None,
            element.size if element is not None else None,
        )

    def _set_position(self, position: Position) -> None:
        if position == self._position:
            return
        self._position = position
        if self._on_change is not None:
            self._on_change(position)

    # Lifecycle -----------------------------------------------------------

    def mount(self) -> Optional[Position]:
        """Place the element once layout is known: stored, default, then rendered offset."""
        saved = self._persistence.restore()
        if saved is not None:
            self._set_position(self._clamp(saved))
            _DRAG_LOGGER.debug("Restored floating action position %s", self._position)
            return self._position
        if self._default_position is not None:
            self._set_position(self._clamp(self._default_position))
            return self._position
        container = self._geometry.container_rect()
        element = self._geometry.element_rect()
        if container is None or element is None:
            return self._position
        relative = Position(element.left - container.left, element.top - container.top)
        self._set_position(self._clamp(relative))
        return self._position

    def sync_with_bounds(self) -> None:
        """Re-clamp after the container changed size and persist the result."""
        if self._position is None:
            return
        self._set_position(self._clamp(self._position))
        self._persistence.save(self._position)

    # Pointer events ------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> bool:
        if self._state is DragState.DRAGGING:
            return False
        element = self._geometry.element_rect()
        if element is None:
            return False
        self._state = DragState.DRAGGING
        self._pointer_id = event.pointer_id
        self._moved = False
        self._grab_offset = Position(event.client_x - element.left, event.client_y - element.top)
        self._geometry.capture_pointer(event.pointer_id)
        _DRAG_LOGGER.debug(
            "Drag initiated at pos=%s offset=%s pointer=%s",
            self._position,
            self._grab_offset,
            event.pointer_id,
        )
        return True

    def pointer_move(self, event: PointerEvent) -> bool:
        """Track the pointer; ``True`` means the caller should suppress default handling."""
        if self._state is not DragState.DRAGGING or event.pointer_id != self._pointer_id:
            return False
        self._moved = True
        container = self._geometry.container_rect()
        if container is None:
            return True
        candidate = Position(
            event.client_x - container.left - self._grab_offset.x,
            event.client_y - container.top - self._grab_offset.y,
        )
        self._set_position(self._clamp(candidate))
        return True

    def pointer_up(self, event: PointerEvent) -> bool:
        if self._state is not DragState.DRAGGING or event.pointer_id != self._pointer_id:
            return False
        moved = self._moved
        self._finish_gesture(release=True)
        self._suppress_next_click = moved
        if moved:
            self._persistence.save(self._position)
            _DRAG_LOGGER.debug("Drag finished; floating action at %s", self._position)
        return True

    def pointer_cancel(self, event: Optional[PointerEvent] = None) -> bool:
        if self._state is not DragState.DRAGGING:
            return False
        if event is not None and event.pointer_id != self._pointer_id:
            return False
        self._finish_gesture(release=True)
        self._suppress_next_click = False
        _DRAG_LOGGER.debug("Drag cancelled; position not persisted")
        return True

    def lost_capture(self, pointer_id: Optional[int] = None) -> bool:
        """The toolkit dropped capture on its own; leave ``DRAGGING`` without persisting."""
        if self._state is not DragState.DRAGGING:
            return False
        if pointer_id is not None and pointer_id != self._pointer_id:
            return False
        self._finish_gesture(release=False)
        self._suppress_next_click = False
        _DRAG_LOGGER.debug("Pointer capture lost mid-drag; position not persisted")
        return True

    def _finish_gesture(self, *, release: bool) -> None:
        pointer_id = self._pointer_id
        self._state = DragState.IDLE
        self._pointer_id = None
        self._moved = False
        if release and pointer_id is not None:
            self._geometry.release_pointer(pointer_id)

    # Click gate ----------------------------------------------------------

    def consume_click_allowance(self) -> bool:
        if self._suppress_next_click:
            self._suppress_next_click = False
            return False
        return True
