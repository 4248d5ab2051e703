"""
Number Mask - Demo Application

A single masked amount field with a locale picker, the raw numeric value it
reports, and a button that sets a value from code.
"""

import sys
from typing import Optional

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QLineEdit, QComboBox, QPushButton, QCheckBox, QFormLayout,
    QMessageBox
)
from PySide6.QtCore import QSettings
from PySide6.QtGui import QFont

from logger import get_logger
from config_validation import MaskConfigurationError, build_mask_config
from locale_support import DEFAULT_LOCALE
from mask_input import get_mask_controller, install_number_mask, remove_number_mask

DEMO_LOCALES = ["en-US", "en-GB", "de-DE", "fr-FR", "es-ES", "en-IN", "ja-JP"]
SAMPLE_VALUE = 42.5


class DemoWindow(QMainWindow):
    """Demo window for the masked amount field."""

    def __init__(self, locale: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Number Mask Demo")
        self.setMinimumWidth(500)

        self.settings = QSettings("NumberMask", "Demo")
        self.logger = get_logger()

        self.setup_ui()

        initial = locale or self.settings.value("locale", DEFAULT_LOCALE)
        if initial not in DEMO_LOCALES:
            self.locale_combo.addItem(initial)
        self.locale_combo.setCurrentText(initial)
        self.apply_mask()

        self.locale_combo.currentTextChanged.connect(self.apply_mask)
        self.pin_final_checkbox.toggled.connect(self.apply_mask)

        self.logger.info("Number Mask demo window initialized")

    def setup_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        title = QLabel("Number Mask Demo")
        title.setFont(QFont("Arial", 16, QFont.Bold))
        layout.addWidget(title)

        form = QFormLayout()
        self.locale_combo = QComboBox()
        self.locale_combo.addItems(DEMO_LOCALES)
        form.addRow("Locale:", self.locale_combo)

        self.pin_final_checkbox = QCheckBox("Finalise values in en-US")
        form.addRow("", self.pin_final_checkbox)

        self.amount_edit = QLineEdit()
        self.amount_edit.setPlaceholderText("Enter Amount")
        form.addRow("Enter Amount:", self.amount_edit)
        layout.addLayout(form)

        self.raw_label = QLabel("Raw value: None")
        layout.addWidget(self.raw_label)

        buttons = QHBoxLayout()
        set_button = QPushButton(f"Set {SAMPLE_VALUE}")
        set_button.clicked.connect(lambda: self.set_value(SAMPLE_VALUE))
        buttons.addWidget(set_button)
        clear_button = QPushButton("Clear")
        clear_button.clicked.connect(lambda: self.set_value(None))
        buttons.addWidget(clear_button)
        buttons.addStretch()
        layout.addLayout(buttons)
        layout.addStretch()

    def apply_mask(self, *_):
        """(Re)install the mask for the selected locale."""
        locale = self.locale_combo.currentText()
        settings = {"locale": locale}
        if self.pin_final_checkbox.isChecked():
            settings["final_locale"] = "en-US"
        try:
            config = build_mask_config(settings)
        except MaskConfigurationError as e:
            QMessageBox.warning(self, "Unsupported Locale", str(e))
            return

        remove_number_mask(self.amount_edit)
        self.amount_edit.clear()
        controller = install_number_mask(self.amount_edit, config)
        controller.value_changed.connect(self.show_value)
        self.show_value(None)

        self.settings.setValue("locale", locale)
        self.logger.info(f"Mask applied for locale {locale}", locale=locale,
                         final_locale=config.effective_final_locale)

    def set_value(self, value: Optional[float]):
        controller = get_mask_controller(self.amount_edit)
        if controller is None:
            return
        controller.write_value(value)
        self.logger.log_user_action("set_value", {"value": value, "display": self.amount_edit.text()})
        self.show_value(controller.value())

    def show_value(self, value: Optional[float]):
        self.raw_label.setText(f"Raw value: {value}")


def main(locale: Optional[str] = None):
    """Main entry point for the demo application."""
    logger = get_logger()
    logger.info("Number Mask demo starting")

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Number Mask Demo")
    app.setOrganizationName("NumberMask")

    try:
        window = DemoWindow(locale)
        window.show()
        exit_code = app.exec()
        logger.info(f"Number Mask demo exited with code: {exit_code}")
        return exit_code
    except Exception as e:
        logger.critical("Critical error starting Number Mask demo", exception=e)
        QMessageBox.critical(None, "Critical Error",
                             f"Failed to start Number Mask demo:\n{str(e)}\n\nCheck logs for details.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
