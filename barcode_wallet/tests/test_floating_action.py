from __future__ import annotations

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from PyQt6.QtCore import QEvent, QPoint, QPointF, QSize, Qt
from PyQt6.QtGui import QMouseEvent, QResizeEvent
from PyQt6.QtWidgets import QApplication, QPushButton, QWidget

from barcode_wallet.bounds import Position
from barcode_wallet.drag_controller import DragState
from barcode_wallet.floating_action import FloatingActionBinding
from barcode_wallet.kv_store import MemoryKeyValueStore
from barcode_wallet.position_store import PositionPersistence


@pytest.fixture
def qt_app():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class _GrabRecordingButton(QPushButton):
    def __init__(self, parent: QWidget) -> None:
        super().__init__("+", parent)
        self.grabs = 0
        self.releases = 0

    def grabMouse(self, *args) -> None:  # type: ignore[override]
        self.grabs += 1

    def releaseMouse(self) -> None:  # type: ignore[override]
        self.releases += 1


def _mouse(event_type: QEvent.Type, widget: QWidget, local: QPoint, button: Qt.MouseButton) -> QMouseEvent:
    global_point = QPointF(widget.mapToGlobal(local))
    return QMouseEvent(
        event_type,
        QPointF(local),
        global_point,
        button,
        button if event_type != QEvent.Type.MouseButtonRelease else Qt.MouseButton.NoButton,
        Qt.KeyboardModifier.NoModifier,
    )


def _build(qt_app, *, default=None):
    container = QWidget()
    container.resize(200, 300)
    button = _GrabRecordingButton(container)
    button.setGeometry(0, 0, 50, 40)
    kv = MemoryKeyValueStore()
    binding = FloatingActionBinding(container, button, PositionPersistence(kv, "fab"), default_position=default)
    activations: list[bool] = []
    binding.activated.connect(lambda: activations.append(True))
    return container, button, kv, binding, activations


@pytest.mark.pyqt_required
def test_attach_places_element_at_clamped_default(qt_app):
    container, button, _kv, binding, _ = _build(qt_app, default=Position(500, 20))

    binding.attach()

    assert binding.controller.position == Position(150, 20)
    assert button.pos() == QPoint(150, 20)
    binding.detach()


@pytest.mark.pyqt_required
def test_drag_moves_button_and_swallows_following_click(qt_app):
    container, button, kv, binding, activations = _build(qt_app, default=Position(0, 0))
    binding.attach()

    press = _mouse(QEvent.Type.MouseButtonPress, button, QPoint(10, 10), Qt.MouseButton.LeftButton)
    assert binding.eventFilter(button, press) is False
    assert binding.controller.state is DragState.DRAGGING
    assert button.grabs == 1

    move = _mouse(QEvent.Type.MouseMove, container, QPoint(70, 90), Qt.MouseButton.NoButton)
    assert binding.eventFilter(button, move) is True
    assert button.pos() == QPoint(60, 80)

    release = _mouse(QEvent.Type.MouseButtonRelease, container, QPoint(70, 90), Qt.MouseButton.LeftButton)
    binding.eventFilter(button, release)
    assert button.releases == 1
    assert PositionPersistence(kv, "fab").restore() == Position(60, 80)

    button.click()
    assert activations == []
    button.click()
    assert activations == [True]
    binding.detach()


@pytest.mark.pyqt_required
def test_container_resize_reclamps(qt_app):
    container, button, kv, binding, _ = _build(qt_app, default=Position(140, 250))
    binding.attach()

    container.resize(100, 100)
    binding.eventFilter(container, QResizeEvent(QSize(100, 100), QSize(200, 300)))

    assert binding.controller.position == Position(50, 60)
    assert button.pos() == QPoint(50, 60)
    assert PositionPersistence(kv, "fab").restore() == Position(50, 60)
    binding.detach()


@pytest.mark.pyqt_required
def test_detach_mid_drag_releases_capture(qt_app):
    container, button, kv, binding, _ = _build(qt_app, default=Position(0, 0))
    binding.attach()
    binding.eventFilter(button, _mouse(QEvent.Type.MouseButtonPress, button, QPoint(5, 5), Qt.MouseButton.LeftButton))

    binding.detach()

    assert binding.controller.state is DragState.IDLE
    assert button.releases == 1
    assert kv.write_count == 0
    assert binding.attached is False


@pytest.mark.pyqt_required
def test_hiding_container_mid_drag_returns_to_idle_without_persisting(qt_app):
    container, button, kv, binding, activations = _build(qt_app, default=Position(0, 0))
    container.show()
    binding.attach()
    binding.eventFilter(button, _mouse(QEvent.Type.MouseButtonPress, button, QPoint(10, 10), Qt.MouseButton.LeftButton))
    binding.eventFilter(button, _mouse(QEvent.Type.MouseMove, container, QPoint(70, 70), Qt.MouseButton.NoButton))
    writes = kv.write_count

    container.hide()

    assert binding.controller.state is DragState.IDLE
    assert kv.write_count == writes
    assert button.releases >= 1

    container.show()
    writes = kv.write_count
    binding.eventFilter(button, _mouse(QEvent.Type.MouseButtonPress, button, QPoint(10, 10), Qt.MouseButton.LeftButton))
    binding.eventFilter(button, _mouse(QEvent.Type.MouseButtonRelease, button, QPoint(10, 10), Qt.MouseButton.LeftButton))
    button.click()

    assert binding.controller.state is DragState.IDLE
    assert kv.write_count == writes
    assert activations == [True]
    binding.detach()
    container.hide()


@pytest.mark.pyqt_required
@pytest.mark.parametrize("event_type", [QEvent.Type.WindowDeactivate, QEvent.Type.FocusOut, QEvent.Type.Hide])
def test_capture_loss_events_abandon_drag(qt_app, event_type):
    container, button, kv, binding, _ = _build(qt_app, default=Position(0, 0))
    binding.attach()
    binding.eventFilter(button, _mouse(QEvent.Type.MouseButtonPress, button, QPoint(10, 10), Qt.MouseButton.LeftButton))
    binding.eventFilter(button, _mouse(QEvent.Type.MouseMove, container, QPoint(40, 40), Qt.MouseButton.NoButton))

    assert binding.eventFilter(button, QEvent(event_type)) is False

    assert binding.controller.state is DragState.IDLE
    assert kv.write_count == 0
    assert button.releases == 1
    assert binding.controller.consume_click_allowance() is True
    binding.detach()


def _build_plain(qt_app):
    container = QWidget()
    container.resize(200, 300)
    element = QWidget(container)
    element.setGeometry(0, 0, 50, 40)
    kv = MemoryKeyValueStore()
    binding = FloatingActionBinding(container, element, PositionPersistence(kv, "fab"), default_position=Position(0, 0))
    activations: list[bool] = []
    binding.activated.connect(lambda: activations.append(True))
    binding.attach()
    return container, element, kv, binding, activations


@pytest.mark.pyqt_required
def test_plain_widget_release_without_move_activates(qt_app):
    container, element, kv, binding, activations = _build_plain(qt_app)

    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonPress, element, QPoint(5, 5), Qt.MouseButton.LeftButton))
    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonRelease, element, QPoint(5, 5), Qt.MouseButton.LeftButton))

    assert activations == [True]
    assert kv.write_count == 0
    binding.detach()


@pytest.mark.pyqt_required
def test_plain_widget_drag_swallows_its_release(qt_app):
    container, element, kv, binding, activations = _build_plain(qt_app)

    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonPress, element, QPoint(5, 5), Qt.MouseButton.LeftButton))
    binding.eventFilter(element, _mouse(QEvent.Type.MouseMove, container, QPoint(45, 65), Qt.MouseButton.NoButton))
    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonRelease, container, QPoint(45, 65), Qt.MouseButton.LeftButton))

    assert activations == []
    assert element.pos() == QPoint(40, 60)
    assert PositionPersistence(kv, "fab").restore() == Position(40, 60)

    # The suppression was spent on the drag's own release.
    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonPress, element, QPoint(5, 5), Qt.MouseButton.LeftButton))
    binding.eventFilter(element, _mouse(QEvent.Type.MouseButtonRelease, element, QPoint(5, 5), Qt.MouseButton.LeftButton))
    assert activations == [True]
    binding.detach()
