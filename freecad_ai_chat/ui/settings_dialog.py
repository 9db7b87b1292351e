"""Settings dialog for the FreeCAD AI chat panel.

Provides a GUI for configuring:
  - API endpoint (stored in FreeCAD's parameter store)
  - Response mode: simulated replies or the real endpoint
  - Simulated reply delay
"""

from .compat import QtWidgets

QDialog = QtWidgets.QDialog
QVBoxLayout = QtWidgets.QVBoxLayout
QFormLayout = QtWidgets.QFormLayout
QComboBox = QtWidgets.QComboBox
QLineEdit = QtWidgets.QLineEdit
QSpinBox = QtWidgets.QSpinBox
QDialogButtonBox = QtWidgets.QDialogButtonBox

from ..config import RESPONSE_MODES, get_config, save_current_config
from ..i18n import translate


def tr(text: str) -> str:
    return translate("SettingsDialog", text)


class SettingsDialog(QDialog):
    """Configuration dialog for the chat panel."""

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.setWindowTitle(tr("AI Settings"))
        self.setMinimumWidth(420)
        self._build_ui()
        self._load_values()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.endpoint_edit = QLineEdit()
        self.endpoint_edit.setPlaceholderText("https://api.example.com/v1/chat/completions")
        form.addRow(tr("API Endpoint:"), self.endpoint_edit)

        self.mode_combo = QComboBox()
        self.mode_combo.addItems([m.capitalize() for m in RESPONSE_MODES])
        form.addRow(tr("Responses:"), self.mode_combo)

        self.delay_spin = QSpinBox()
        self.delay_spin.setRange(0, 10000)
        self.delay_spin.setSingleStep(250)
        self.delay_spin.setSuffix(" ms")
        form.addRow(tr("Simulated delay:"), self.delay_spin)

        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._save_and_close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _load_values(self):
        cfg = get_config()
        self.endpoint_edit.setText(self.session.api_endpoint)
        self.mode_combo.setCurrentIndex(RESPONSE_MODES.index(cfg.response_mode))
        self.delay_spin.setValue(cfg.response_delay_ms)

    def _save_and_close(self):
        # An empty endpoint leaves the stored one alone
        endpoint = self.endpoint_edit.text().strip()
        if endpoint:
            self.session.set_api_endpoint(endpoint)

        cfg = get_config()
        cfg.response_mode = RESPONSE_MODES[self.mode_combo.currentIndex()]
        cfg.response_delay_ms = self.delay_spin.value()
        save_current_config()
        self.accept()
