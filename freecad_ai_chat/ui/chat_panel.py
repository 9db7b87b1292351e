"""Chat panel widget for FreeCAD AI.

A collapsible header (title, open/save, clear, settings and collapse
buttons), a QTextBrowser showing the conversation, and a single-line
input with a send button.

The panel is a view over a ChatSession: it renders the session's
visible messages after every change and forwards the session's events
as Qt signals. Simulated replies are delayed with QTimer; real API
calls run in a QThread whose results are delivered back on the GUI
thread.
"""

import logging
import os

from .compat import QtWidgets, QtCore, Signal, Slot

QWidget = QtWidgets.QWidget
QDockWidget = QtWidgets.QDockWidget
QVBoxLayout = QtWidgets.QVBoxLayout
QHBoxLayout = QtWidgets.QHBoxLayout
QTextBrowser = QtWidgets.QTextBrowser
QLineEdit = QtWidgets.QLineEdit
QPushButton = QtWidgets.QPushButton
QLabel = QtWidgets.QLabel
QStyle = QtWidgets.QStyle
QMessageBox = QtWidgets.QMessageBox
QFileDialog = QtWidgets.QFileDialog
Qt = QtCore.Qt
QEvent = QtCore.QEvent
QThread = QtCore.QThread
QTimer = QtCore.QTimer
QPropertyAnimation = QtCore.QPropertyAnimation
QAbstractAnimation = QtCore.QAbstractAnimation
QEasingCurve = QtCore.QEasingCurve

from ..config import CONVERSATIONS_DIR, default_preferences, get_config
from ..core.responder import ApiResponder, ResponseController, TemplateResponder
from ..core.session import ChatSession
from ..i18n import translate
from ..llm.client import EndpointClient
from .message_view import render_conversation

logger = logging.getLogger(__name__)

COLLAPSE_ANIMATION_MS = 200
DEFAULT_EXPANDED_HEIGHT = 400
QWIDGETSIZE_MAX = 16777215


def tr(text: str) -> str:
    return translate("ChatPanel", text)


# ── API worker thread ───────────────────────────────────────

class _ApiWorker(QThread):
    """Runs one blocking endpoint request off the GUI thread.

    The worker keeps the callbacks of the request it serves, so results
    from an older worker never reach a newer request's handlers.
    """

    succeeded = Signal(object, object)  # (worker, decoded response body)
    failed = Signal(object, str)        # (worker, error message)

    def __init__(self, work, on_done, on_error, parent=None):
        super().__init__(parent)
        self._work = work
        self.on_done = on_done
        self.on_error = on_error

    def run(self):
        try:
            result = self._work()
        except Exception as e:
            self.failed.emit(self, str(e))
            return
        self.succeeded.emit(self, result)


# ── Chat panel ──────────────────────────────────────────────

class ChatPanel(QWidget):
    """Main chat panel for FreeCAD AI."""

    messageSent = Signal(str)
    responseReceived = Signal(str)
    errorOccurred = Signal(str)
    collapseStateChanged = Signal(bool)

    def __init__(self, parent=None, session=None, responder=None):
        super().__init__(parent)
        self.setObjectName("FreeCADAIChatPanel")

        self.session = session if session is not None else ChatSession(default_preferences())
        self._collapsed = False
        self._expanded_height = 0
        self._workers = []

        self._build_ui()

        self.controller = ResponseController(
            self.session, responder if responder is not None else self._make_responder()
        )

        self.session.connect("message_sent", self._on_message_sent)
        self.session.connect("response_received", self._on_response_received)
        self.session.connect("error_occurred", self._on_error)

        self._refresh()

    def _build_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # ── Header (always visible) ──
        self.header = QWidget(self)
        self.header.setObjectName("AIChatHeader")
        self.header.setStyleSheet(
            "#AIChatHeader { background-color: #f0f0f0; border-bottom: 1px solid #ccc; }"
        )
        header_layout = QHBoxLayout(self.header)
        header_layout.setContentsMargins(8, 6, 8, 6)

        title = QLabel(tr("AI Assistant"))
        title.setStyleSheet("font-weight: bold; font-size: 14px;")
        header_layout.addWidget(title)
        header_layout.addStretch()

        self.open_btn = self._header_button(QStyle.SP_DialogOpenButton, tr("Open conversation"))
        self.open_btn.clicked.connect(self._on_open_clicked)
        header_layout.addWidget(self.open_btn)

        self.save_btn = self._header_button(QStyle.SP_DialogSaveButton, tr("Save conversation"))
        self.save_btn.clicked.connect(self._on_save_clicked)
        header_layout.addWidget(self.save_btn)

        self.clear_btn = self._header_button(QStyle.SP_DialogDiscardButton, tr("Clear conversation"))
        self.clear_btn.clicked.connect(self._on_clear_clicked)
        header_layout.addWidget(self.clear_btn)

        self.settings_btn = self._header_button(QStyle.SP_FileDialogDetailedView, tr("Settings"))
        self.settings_btn.clicked.connect(self._on_settings_clicked)
        header_layout.addWidget(self.settings_btn)

        self.collapse_btn = self._header_button(
            QStyle.SP_ToolBarVerticalExtensionButton, tr("Collapse panel")
        )
        self.collapse_btn.clicked.connect(self.toggle_collapsed)
        header_layout.addWidget(self.collapse_btn)

        self.header.installEventFilter(self)
        main_layout.addWidget(self.header)

        # ── Collapsible content ──
        self.content = QWidget(self)
        content_layout = QVBoxLayout(self.content)
        content_layout.setContentsMargins(4, 4, 4, 4)
        content_layout.setSpacing(4)

        self.chat_display = QTextBrowser()
        self.chat_display.setOpenExternalLinks(True)
        self.chat_display.setStyleSheet(
            "QTextBrowser { border: none; background-color: #ffffff; }"
        )
        content_layout.addWidget(self.chat_display, 1)

        input_layout = QHBoxLayout()
        self.input_edit = QLineEdit()
        self.input_edit.setPlaceholderText(tr("Type your message..."))
        self.input_edit.returnPressed.connect(self._on_send_clicked)
        input_layout.addWidget(self.input_edit, 1)

        self.send_btn = QPushButton(tr("Send"))
        self.send_btn.setToolTip(tr("Send message"))
        self.send_btn.clicked.connect(self._on_send_clicked)
        input_layout.addWidget(self.send_btn)

        content_layout.addLayout(input_layout)
        main_layout.addWidget(self.content, 1)

    def _header_button(self, icon, tooltip):
        btn = QPushButton(self.header)
        btn.setIcon(self.style().standardIcon(icon))
        btn.setToolTip(tooltip)
        btn.setFlat(True)
        btn.setFixedSize(24, 24)
        return btn

    # ── Responders ──────────────────────────────────────────

    def _make_responder(self):
        cfg = get_config()
        if cfg.response_mode == "api":
            client = EndpointClient(
                self.session.api_endpoint, model=cfg.model, timeout=cfg.request_timeout
            )
            return ApiResponder(client, dispatcher=self._dispatch_in_thread)
        return TemplateResponder(scheduler=self._schedule, delay_ms=cfg.response_delay_ms)

    def reload_responder(self):
        """Rebuild the responder after the endpoint or mode changed."""
        self.controller.responder = self._make_responder()

    @staticmethod
    def _schedule(delay_ms, callback):
        QTimer.singleShot(delay_ms, callback)

    def _dispatch_in_thread(self, work, on_done, on_error):
        worker = _ApiWorker(work, on_done, on_error, parent=self)
        worker.succeeded.connect(self._on_worker_succeeded)
        worker.failed.connect(self._on_worker_failed)
        self._workers.append(worker)
        worker.start()

    def _finish_worker(self, worker):
        if worker in self._workers:
            self._workers.remove(worker)
        worker.wait()
        worker.deleteLater()

    @Slot(object, object)
    def _on_worker_succeeded(self, worker, data):
        self._finish_worker(worker)
        worker.on_done(data)

    @Slot(object, str)
    def _on_worker_failed(self, worker, message):
        self._finish_worker(worker)
        worker.on_error(message)

    # ── Actions ─────────────────────────────────────────────

    def send_message(self, text: str) -> bool:
        """Submit text to the session and request a reply."""
        return self.controller.send(text)

    def clear_conversation(self):
        self.session.clear()
        self._refresh()

    def save_conversation(self, path: str) -> bool:
        return self.session.save_file(path)

    def load_conversation(self, path: str) -> bool:
        ok = self.session.load_file(path)
        if ok:
            self._refresh()
        return ok

    def set_api_endpoint(self, endpoint: str):
        self.session.set_api_endpoint(endpoint)
        self.reload_responder()

    def _on_send_clicked(self):
        text = self.input_edit.text()
        if self.send_message(text):
            self.input_edit.clear()

    def _on_clear_clicked(self):
        answer = QMessageBox.question(
            self, tr("Clear Conversation"),
            tr("Are you sure you want to clear the conversation history?"),
        )
        if answer == QMessageBox.Yes:
            self.clear_conversation()

    def _on_settings_clicked(self):
        from .settings_dialog import SettingsDialog
        dlg = SettingsDialog(self.session, self)
        if dlg.exec():
            self.reload_responder()

    def _on_save_clicked(self):
        os.makedirs(CONVERSATIONS_DIR, exist_ok=True)
        path, _ = QFileDialog.getSaveFileName(
            self, tr("Save Conversation"),
            os.path.join(CONVERSATIONS_DIR, "conversation.json"),
            tr("Conversation (*.json)"),
        )
        if path and not self.save_conversation(path):
            QMessageBox.warning(self, tr("Save Conversation"),
                                tr("Could not save the conversation."))

    def _on_open_clicked(self):
        path, _ = QFileDialog.getOpenFileName(
            self, tr("Open Conversation"), CONVERSATIONS_DIR,
            tr("Conversation (*.json)"),
        )
        if path and not self.load_conversation(path):
            QMessageBox.warning(self, tr("Open Conversation"),
                                tr("The file is not a saved conversation."))

    # ── Session events ──────────────────────────────────────

    def _on_message_sent(self, text):
        self._refresh()
        self.messageSent.emit(text)

    def _on_response_received(self, content):
        self._refresh()
        self.responseReceived.emit(content)

    def _on_error(self, message):
        self._refresh()
        self.errorOccurred.emit(message)

    # ── Collapse ────────────────────────────────────────────

    @property
    def collapsed(self) -> bool:
        return self._collapsed

    def toggle_collapsed(self):
        self.set_collapsed(not self._collapsed)

    def set_collapsed(self, collapsed: bool):
        if collapsed == self._collapsed:
            return
        self._collapsed = collapsed

        anim = QPropertyAnimation(self.content, b"maximumHeight", self)
        anim.setDuration(COLLAPSE_ANIMATION_MS)
        if collapsed:
            self._expanded_height = self.content.height()
            anim.setStartValue(self._expanded_height)
            anim.setEndValue(0)
        else:
            anim.setStartValue(0)
            anim.setEndValue(self._expanded_height or DEFAULT_EXPANDED_HEIGHT)
        anim.setEasingCurve(QEasingCurve.InOutQuad)
        anim.finished.connect(self._on_collapse_finished)
        anim.start(QAbstractAnimation.DeleteWhenStopped)

        self._update_collapse_button()
        self.collapseStateChanged.emit(collapsed)

    def _on_collapse_finished(self):
        if not self._collapsed:
            self.content.setMaximumHeight(QWIDGETSIZE_MAX)

    def _update_collapse_button(self):
        if self._collapsed:
            icon = QStyle.SP_ToolBarHorizontalExtensionButton
            tooltip = tr("Expand panel")
        else:
            icon = QStyle.SP_ToolBarVerticalExtensionButton
            tooltip = tr("Collapse panel")
        self.collapse_btn.setIcon(self.style().standardIcon(icon))
        self.collapse_btn.setToolTip(tooltip)

    # ── Qt events ───────────────────────────────────────────

    def eventFilter(self, obj, event):
        if obj is self.header and event.type() == QEvent.MouseButtonDblClick:
            self.toggle_collapsed()
            return True
        return super().eventFilter(obj, event)

    def showEvent(self, event):
        super().showEvent(event)
        self.input_edit.setFocus()

    # ── UI helpers ──────────────────────────────────────────

    def _refresh(self):
        """Re-render the conversation and sync the input state."""
        self.chat_display.setHtml(render_conversation(self.session.visible_messages()))
        scrollbar = self.chat_display.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

        waiting = self.session.waiting_for_response
        self.send_btn.setEnabled(not waiting)


def create_chat_panel(parent=None) -> ChatPanel:
    """Factory used by the workbench to embed the panel."""
    return ChatPanel(parent)


# ── Singleton dock ──────────────────────────────────────────

_dock_widget = None


def get_chat_dock(create=True):
    """Get or create the singleton chat dock widget."""
    global _dock_widget

    if _dock_widget is not None:
        return _dock_widget

    if not create:
        return None

    try:
        import FreeCADGui as Gui
        mw = Gui.getMainWindow()
    except ImportError:
        mw = None

    _dock_widget = QDockWidget("FreeCAD AI", mw)
    _dock_widget.setObjectName("FreeCADAIChatDock")
    _dock_widget.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
    _dock_widget.setWidget(create_chat_panel(_dock_widget))

    if mw:
        mw.addDockWidget(Qt.RightDockWidgetArea, _dock_widget)

    return _dock_widget
