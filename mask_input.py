"""
Masked Amount Input for Number Mask.

Binds a ``NumberMaskEngine`` to a ``QLineEdit``: keystrokes are filtered
before insertion, the text is reformatted live while typing, finalised when
the field loses focus, and the caret is restored after each rewrite.
"""

from functools import partial
from typing import Callable, Dict, List, Optional, Protocol

from PySide6.QtCore import QEvent, QObject, Qt, QTimer, Signal
from PySide6.QtGui import QKeyEvent, QKeySequence
from PySide6.QtWidgets import QLineEdit, QWidget

from logger import LogCategory, LoggableMixin
from number_mask import MaskConfig, NumberMaskEngine

KEY_NAMES = {
    Qt.Key.Key_Backspace.value: "Backspace",
    Qt.Key.Key_Delete.value: "Delete",
    Qt.Key.Key_Left.value: "ArrowLeft",
    Qt.Key.Key_Right.value: "ArrowRight",
    Qt.Key.Key_Tab.value: "Tab",
    Qt.Key.Key_Backtab.value: "Tab",
}

# Clipboard and selection shortcuts reach the field; pasted text is masked on textEdited
PASSTHROUGH_SHORTCUTS = (
    QKeySequence.StandardKey.SelectAll,
    QKeySequence.StandardKey.Copy,
    QKeySequence.StandardKey.Cut,
    QKeySequence.StandardKey.Paste,
    QKeySequence.StandardKey.Undo,
    QKeySequence.StandardKey.Redo,
)


class ValueAccessor(Protocol):
    """Receiver for a masked field's value and touched notifications."""

    def on_value_changed(self, value: Optional[float]) -> None: ...

    def on_touched(self) -> None: ...


def key_name(event: QKeyEvent) -> str:
    """Name of the key in ``event`` as understood by the key filter."""
    # key() is a plain int on some PySide6 releases and a Qt.Key member on others
    code = getattr(event.key(), "value", event.key())
    name = KEY_NAMES.get(code)
    if name is not None:
        return name
    return event.text()


class NumberMaskController(QObject, LoggableMixin):
    """Masks one ``QLineEdit`` and reports its numeric value."""

    # Signals
    value_changed = Signal(object)
    touched = Signal()

    def __init__(self, widget: QLineEdit, config: Optional[MaskConfig] = None):
        QObject.__init__(self, widget)
        LoggableMixin.__init__(self)

        self.widget = widget
        self.engine = NumberMaskEngine(config)
        self._value: Optional[float] = None
        self._change_callbacks: List[Callable[[Optional[float]], None]] = []
        self._touched_callbacks: List[Callable[[], None]] = []

        widget.setInputMethodHints(widget.inputMethodHints() | Qt.InputMethodHint.ImhFormattedNumbersOnly)
        widget.installEventFilter(self)
        widget.textEdited.connect(self._handle_input)

        self.log_field_event("Number mask attached",
                             widget=type(widget).__name__, locale=self.engine.config.locale)

    @property
    def config(self) -> MaskConfig:
        return self.engine.config

    def value(self) -> Optional[float]:
        """Last numeric value emitted, ``None`` while the field is empty."""
        return self._value

    def register_on_change(self, callback: Callable[[Optional[float]], None]):
        self._change_callbacks.append(callback)

    def register_on_touched(self, callback: Callable[[], None]):
        self._touched_callbacks.append(callback)

    def bind(self, accessor: ValueAccessor):
        """Register both callbacks of a value accessor."""
        self.register_on_change(accessor.on_value_changed)
        self.register_on_touched(accessor.on_touched)

    def write_value(self, value: Optional[float]):
        """Set the field from code, rendered in final form."""
        display = self.engine.on_write(value)
        self.widget.setText(display)
        self._value = self.engine.extract(display) if display else None
        self.log_debug("Value written programmatically", value=value, display=display)

    def detach(self):
        """Stop masking the widget."""
        self.widget.removeEventFilter(self)
        self.widget.textEdited.disconnect(self._handle_input)
        self.log_field_event("Number mask detached", widget=type(self.widget).__name__)

    def eventFilter(self, obj, event):
        """Filter keystrokes and finalise on focus loss."""
        if obj is self.widget:
            if event.type() == QEvent.Type.KeyPress:
                if not self._accepts(event):
                    event.accept()
                    return True
            elif event.type() == QEvent.Type.FocusOut:
                self._handle_blur()
        return super().eventFilter(obj, event)

    def _selection(self):
        start = self.widget.selectionStart()
        if start < 0:
            caret = self.widget.cursorPosition()
            return caret, caret
        return start, start + len(self.widget.selectedText())

    def _accepts(self, event: QKeyEvent) -> bool:
        if any(event.matches(shortcut) for shortcut in PASSTHROUGH_SHORTCUTS):
            return True
        start, end = self._selection()
        return self.engine.accept_key(key_name(event), self.widget.text(), start, end)

    def _handle_input(self, raw: str):
        caret = self.widget.cursorPosition()
        result = self.engine.on_input(raw, caret)

        self.widget.setText(result.display)
        self._emit_value(result.value)
        # setText() moves the caret to the end; correct it after this event completes
        QTimer.singleShot(0, partial(self._restore_caret, result.display, result.caret))

    def _restore_caret(self, display: str, caret: int):
        if self.widget.text() != display:
            return
        self.widget.setCursorPosition(caret)
        self.log_trace("Caret restored", category=LogCategory.CURSOR, caret=caret)

    def _handle_blur(self):
        result = self.engine.on_blur(self.widget.text())
        self.widget.setText(result.display)
        self.log_debug("Field finalised", display=result.display, value=result.value)
        self._mark_touched()

    def _emit_value(self, value: Optional[float]):
        self._value = value
        for callback in self._change_callbacks:
            callback(value)
        self.value_changed.emit(value)

    def _mark_touched(self):
        for callback in self._touched_callbacks:
            callback()
        self.touched.emit()


class NumberMaskManager(QObject, LoggableMixin):
    """Tracks masked widgets so masks can be looked up and removed."""

    _instance = None

    def __init__(self, parent=None):
        QObject.__init__(self, parent)
        LoggableMixin.__init__(self)
        self.controllers: Dict[QLineEdit, NumberMaskController] = {}

    @classmethod
    def get_instance(cls):
        """Get singleton instance of the mask manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def install_on_widget(self, widget: QLineEdit,
                          config: Optional[MaskConfig] = None) -> NumberMaskController:
        """Install a number mask on a widget, returning its controller."""
        existing = self.controllers.get(widget)
        if existing is not None:
            return existing

        controller = NumberMaskController(widget, config)
        self.controllers[widget] = controller
        widget.destroyed.connect(partial(self._forget, widget))
        return controller

    def remove_from_widget(self, widget: QLineEdit):
        """Remove the number mask from a widget."""
        controller = self.controllers.pop(widget, None)
        if controller is None:
            return
        controller.detach()
        controller.deleteLater()

    def get_controller(self, widget: QLineEdit) -> Optional[NumberMaskController]:
        return self.controllers.get(widget)

    def install_on_children(self, parent_widget: QWidget,
                            config: Optional[MaskConfig] = None) -> List[NumberMaskController]:
        """Mask every ``QLineEdit`` child flagged with the ``numberMask`` property."""
        installed = []
        for child in parent_widget.findChildren(QLineEdit):
            if child.property("numberMask"):
                installed.append(self.install_on_widget(child, config))
        return installed

    def _forget(self, widget, *_):
        self.controllers.pop(widget, None)


# Convenience functions for global access
def get_mask_manager() -> NumberMaskManager:
    """Get the global mask manager instance."""
    return NumberMaskManager.get_instance()


def install_number_mask(widget: QLineEdit, config: Optional[MaskConfig] = None) -> NumberMaskController:
    """Install a number mask on a widget."""
    return get_mask_manager().install_on_widget(widget, config)


def remove_number_mask(widget: QLineEdit):
    """Remove the number mask from a widget."""
    get_mask_manager().remove_from_widget(widget)


def get_mask_controller(widget: QLineEdit) -> Optional[NumberMaskController]:
    """Controller masking ``widget``, if any."""
    return get_mask_manager().get_controller(widget)
