import math

import pytest

pytest.importorskip("PySide6")
try:
    from PySide6.QtCore import QEvent, Qt
    from PySide6.QtGui import QFocusEvent, QKeyEvent
    from PySide6.QtTest import QTest
    from PySide6.QtWidgets import QApplication, QLineEdit, QWidget, QVBoxLayout
except ImportError:  # pragma: no cover - executed only when Qt bindings incomplete
    pytest.skip("PySide6 QtWidgets bindings unavailable", allow_module_level=True)

from mask_input import (
    NumberMaskController,
    get_mask_controller,
    get_mask_manager,
    install_number_mask,
    key_name,
    remove_number_mask,
)
from number_mask import MaskConfig


class RecordingAccessor:
    def __init__(self):
        self.values = []
        self.touched = 0

    def on_value_changed(self, value):
        self.values.append(value)

    def on_touched(self):
        self.touched += 1


@pytest.fixture()
def masked(qt_app):
    edit = QLineEdit()
    controller = NumberMaskController(edit, MaskConfig("en-US"))
    accessor = RecordingAccessor()
    controller.bind(accessor)
    yield edit, controller, accessor
    controller.detach()
    edit.deleteLater()


def blur(edit):
    QApplication.sendEvent(edit, QFocusEvent(QEvent.Type.FocusOut))


def test_typing_formats_live_and_reports_values(masked):
    edit, controller, accessor = masked

    QTest.keyClicks(edit, "12000")

    assert edit.text() == "12,000"
    assert accessor.values == [1, 12, 120, 1200, 12000]
    assert controller.value() == 12000


def test_letters_and_symbols_are_suppressed(masked):
    edit, controller, accessor = masked

    QTest.keyClicks(edit, "1a-b 2$")

    assert edit.text() == "12"
    assert accessor.values == [1, 12]


def test_second_separator_is_suppressed(masked):
    edit, _, _ = masked

    QTest.keyClicks(edit, "1.5.")

    assert edit.text() == "1.5"


def test_blur_finalises_display_and_marks_touched(masked):
    edit, controller, accessor = masked
    touched = []
    controller.touched.connect(lambda: touched.append(True))
    QTest.keyClicks(edit, "1234.5")
    assert edit.text() == "1,234.5"

    blur(edit)

    assert edit.text() == "1,234.50"
    assert accessor.touched == 1
    assert touched == [True]


def test_blur_on_empty_field_keeps_it_empty(masked):
    edit, controller, accessor = masked

    blur(edit)

    assert edit.text() == ""
    assert controller.value() is None
    assert accessor.touched == 1


def test_clearing_field_emits_none(masked):
    edit, controller, accessor = masked
    emitted = []
    controller.value_changed.connect(emitted.append)
    QTest.keyClicks(edit, "5")

    edit.selectAll()
    QTest.keyClick(edit, Qt.Key.Key_Backspace)

    assert edit.text() == ""
    assert accessor.values == [5, None]
    assert emitted == [5, None]
    assert controller.value() is None


def test_separator_replaces_full_selection(masked, qt_app):
    edit, controller, accessor = masked
    controller.write_value(1234.56)
    assert edit.text() == "1,234.56"

    edit.selectAll()
    QTest.keyClicks(edit, ".")
    qt_app.processEvents()

    assert edit.text() == "0."
    assert accessor.values == [0]
    assert edit.cursorPosition() == 2


def test_caret_restored_after_grouping_changes(masked, qt_app):
    edit, _, _ = masked
    QTest.keyClicks(edit, "1234")
    assert edit.text() == "1,234"

    edit.setCursorPosition(1)
    QTest.keyClicks(edit, "5")
    qt_app.processEvents()

    assert edit.text() == "15,234"
    assert edit.cursorPosition() == 2


def test_caret_restored_after_backspace_removes_grouping(masked, qt_app):
    edit, _, _ = masked
    QTest.keyClicks(edit, "1234")

    edit.setCursorPosition(3)
    QTest.keyClick(edit, Qt.Key.Key_Backspace)
    qt_app.processEvents()

    assert edit.text() == "134"
    assert edit.cursorPosition() == 1


def test_write_value_renders_final_form(masked):
    edit, controller, accessor = masked

    controller.write_value(42.5)
    assert edit.text() == "42.50"
    assert controller.value() == 42.5

    controller.write_value(None)
    assert edit.text() == ""
    assert controller.value() is None

    controller.write_value(math.nan)
    assert edit.text() == ""
    assert controller.value() is None
    # Programmatic writes are not echoed back as edits
    assert accessor.values == []


def test_write_value_reports_displayed_precision(masked):
    edit, controller, _ = masked

    controller.write_value(42.567)
    assert edit.text() == "42.57"
    assert controller.value() == pytest.approx(42.57)
    assert controller.value() == pytest.approx(controller.engine.extract(edit.text()))


def test_shift_tab_passes_key_filter(masked):
    edit, controller, _ = masked
    event = QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Backtab, Qt.KeyboardModifier.ShiftModifier)

    assert key_name(event) == "Tab"
    assert controller.eventFilter(edit, event) is False


def test_shift_tab_moves_focus_to_previous_field(qt_app):
    window = QWidget()
    layout = QVBoxLayout(window)
    first = QLineEdit()
    second = QLineEdit()
    layout.addWidget(first)
    layout.addWidget(second)
    controller = NumberMaskController(second, MaskConfig("en-US"))
    window.show()
    window.activateWindow()
    if not QTest.qWaitForWindowActive(window):
        controller.detach()
        window.close()
        pytest.skip("window cannot be activated on this platform")

    second.setFocus()
    qt_app.processEvents()
    QTest.keyClick(second, Qt.Key.Key_Backtab, Qt.KeyboardModifier.ShiftModifier)
    qt_app.processEvents()

    assert first.hasFocus()
    controller.detach()
    window.close()


def test_german_locale_field(qt_app):
    edit = QLineEdit()
    controller = NumberMaskController(edit, MaskConfig("de-DE"))

    QTest.keyClicks(edit, "1234,5")
    assert edit.text() == "1.234,5"
    assert controller.value() == pytest.approx(1234.5)

    blur(edit)
    assert edit.text() == "1.234,50"
    controller.detach()


def test_numeric_input_hint_set(masked):
    edit, _, _ = masked
    assert edit.inputMethodHints() & Qt.InputMethodHint.ImhFormattedNumbersOnly


def test_manager_installs_once_and_removes(qt_app):
    edit = QLineEdit()

    controller = install_number_mask(edit, MaskConfig("en-US"))
    assert install_number_mask(edit) is controller
    assert get_mask_controller(edit) is controller

    remove_number_mask(edit)
    assert get_mask_controller(edit) is None

    QTest.keyClicks(edit, "ab")
    assert edit.text() == "ab"


def test_manager_installs_on_flagged_children(qt_app):
    parent = QWidget()
    layout = QVBoxLayout(parent)
    amount = QLineEdit()
    amount.setProperty("numberMask", True)
    name = QLineEdit()
    layout.addWidget(amount)
    layout.addWidget(name)

    installed = get_mask_manager().install_on_children(parent, MaskConfig("en-US"))

    assert [controller.widget for controller in installed] == [amount]
    assert get_mask_controller(name) is None
    remove_number_mask(amount)
