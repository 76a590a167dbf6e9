"""PyQt6 binding that drives a floating action widget through DragController."""
from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QEvent, QObject, QPoint, Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractButton, QWidget

from barcode_wallet.bounds import Position, Rect
from barcode_wallet.drag_controller import DragController, PointerEvent
from barcode_wallet.position_store import PositionPersistence

_DRAG_LOGGER = logging.getLogger("BarcodeWallet.Drag")

MOUSE_POINTER_ID = 1

_CAPTURE_LOSS_EVENTS = frozenset(
    {
        QEvent.Type.Hide,
        QEvent.Type.WindowDeactivate,
        QEvent.Type.FocusOut,
    }
)


def _widget_rect(widget: Optional[QWidget]) -> Optional[Rect]:
    if widget is None:
        return None
    origin = widget.mapToGlobal(QPoint(0, 0))
    return Rect(float(origin.x()), float(origin.y()), float(widget.width()), float(widget.height()))


class FloatingActionBinding(QObject):
    """Keeps ``element`` draggable inside ``container`` and gates its clicks.

    ``attach`` installs the event filters and places the element; ``detach``
    removes them again and cancels any drag in progress. Connect to
    ``activated`` instead of the element's own ``clicked`` so that the click
    Qt delivers at the end of a drag is swallowed.
    """

    activated = pyqtSignal()

    def __init__(
        self,
        container: QWidget,
        element: QWidget,
        persistence: PositionPersistence,
        *,
        default_position: Optional[Position] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._container = container
        self._element = element
        self._attached = False
        self._controller = DragController(
            self,
            persistence,
            default_position=default_position,
            on_change=self._apply_position,
        )

    @property
    def controller(self) -> DragController:
        return self._controller

    @property
    def attached(self) -> bool:
        return self._attached

    # GeometryProvider ----------------------------------------------------

    def container_rect(self) -> Optional[Rect]:
        return _widget_rect(self._container)

    def element_rect(self) -> Optional[Rect]:
        return _widget_rect(self._element)

    def capture_pointer(self, pointer_id: int) -> None:
        self._element.grabMouse()

    def release_pointer(self, pointer_id: int) -> None:
        self._element.releaseMouse()

    # Lifecycle -----------------------------------------------------------

    def attach(self) -> None:
        if self._attached:
            return
        self._element.installEventFilter(self)
        self._container.installEventFilter(self)
        if isinstance(self._element, QAbstractButton):
            self._element.clicked.connect(self._handle_clicked)
        self._attached = True
        self._controller.mount()

    def detach(self) -> None:
        if not self._attached:
            return
        self._controller.pointer_cancel()
        self._element.removeEventFilter(self)
        self._container.removeEventFilter(self)
        if isinstance(self._element, QAbstractButton):
            self._element.clicked.disconnect(self._handle_clicked)
        self._attached = False

    # Events --------------------------------------------------------------

    def _apply_position(self, position: Position) -> None:
        self._element.move(int(round(position.x)), int(round(position.y)))

    def _pointer_event(self, event) -> PointerEvent:
        point = event.globalPosition()
        return PointerEvent(MOUSE_POINTER_ID, float(point.x()), float(point.y()))

    def _handle_clicked(self, *_args) -> None:
        if self._controller.consume_click_allowance():
            self.activated.emit()
        else:
            _DRAG_LOGGER.debug("Suppressed click that ended a drag gesture")

    def _abandon_drag(self, event_type: QEvent.Type) -> None:
        if not self._controller.is_dragging:
            return
        self._controller.lost_capture(MOUSE_POINTER_ID)
        # Qt only drops the grab by itself on hide; deactivation keeps it.
        self._element.releaseMouse()
        _DRAG_LOGGER.debug("Drag abandoned on %s", event_type.name)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        event_type = event.type()
        if event_type in _CAPTURE_LOSS_EVENTS and watched in (self._container, self._element):
            self._abandon_drag(event_type)
            return False
        if watched is self._container:
            if event_type == QEvent.Type.Resize:
                self._controller.sync_with_bounds()
            return False
        if watched is not self._element:
            return False
        if event_type == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
            self._controller.pointer_down(self._pointer_event(event))
            return False
        if event_type == QEvent.Type.MouseMove:
            if self._controller.pointer_move(self._pointer_event(event)):
                event.accept()
                return True
            return False
        if event_type == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
            handled = self._controller.pointer_up(self._pointer_event(event))
            # Plain widgets have no clicked signal; the release is the click.
            if handled and not isinstance(self._element, QAbstractButton):
                self._handle_clicked()
            return False
        return False
