"""
Main Application Window
=======================
The primary GUI container: the bubble canvas with a floating zoom overlay
and a File menu for opening datasets.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (File -> Open, zoom buttons) to the
   SceneController.
"""
import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent, QResizeEvent
from PySide6.QtWidgets import QFileDialog, QFrame, QHBoxLayout, QMainWindow, QMessageBox, QPushButton

from bubblechart.controller.scene import SceneController
from bubblechart.model.body import DatasetError
from bubblechart.model.io import load_dataset
from bubblechart.view.canvas import BubbleCanvas

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Bubble Chart"
OVERLAY_MARGIN = 10


class MainWindow(QMainWindow):
    def __init__(self, controller: SceneController) -> None:
        super().__init__()
        self.controller = controller

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(840, 640)

        self.canvas = BubbleCanvas(controller, self)
        self.setCentralWidget(self.canvas)

        self._setup_overlay_controls()
        self._setup_menus()

    # ------------------------------------------------------------------------------
    # UI setup
    # ------------------------------------------------------------------------------

    def _setup_overlay_controls(self) -> None:
        """Floating zoom buttons in the top right corner of the canvas."""
        self.overlay_widget = QFrame(self.canvas)
        self.overlay_widget.setStyleSheet("""
            QFrame { background-color: rgba(255, 255, 255, 200); border-radius: 6px; border: 1px solid #ccc; }
            QPushButton { background-color: transparent; border: none; padding: 4px; min-width: 24px; font-weight: bold; }
            QPushButton:hover { background-color: rgba(0, 0, 0, 10); }
        """)

        layout = QHBoxLayout(self.overlay_widget)
        layout.setContentsMargins(4, 4, 4, 4)

        def make_btn(text, slot, tooltip):
            btn = QPushButton(text)
            btn.setToolTip(tooltip)
            btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
            btn.clicked.connect(slot)
            layout.addWidget(btn)
            return btn

        self.btn_zoom_in = make_btn("+", self.controller.zoom_in, "Zoom in")
        self.btn_zoom_out = make_btn("−", self.controller.zoom_out, "Zoom out")
        self.btn_reset = make_btn("⟲", lambda: self.controller.reset_view(animated=True), "Reset view")

        self.overlay_widget.adjustSize()
        self._place_overlay()

    def _setup_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open dataset...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self.on_open_dataset)
        file_menu.addAction(open_action)

        file_menu.addSeparator()
        exit_action = QAction("E&xit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

    def _place_overlay(self) -> None:
        x = self.canvas.width() - self.overlay_widget.width() - OVERLAY_MARGIN
        self.overlay_widget.move(max(0, x), OVERLAY_MARGIN)
        self.overlay_widget.raise_()

    # ------------------------------------------------------------------------------
    # Slots / events
    # ------------------------------------------------------------------------------

    def on_open_dataset(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open dataset", "", "JSON (*.json)")
        if not path:
            return
        try:
            records = load_dataset(path)
        except DatasetError as e:
            QMessageBox.warning(self, "Invalid dataset", str(e))
            return
        self.controller.set_dataset(records)

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self._place_overlay()

    def closeEvent(self, event: QCloseEvent) -> None:
        self.controller.shutdown()
        event.accept()
