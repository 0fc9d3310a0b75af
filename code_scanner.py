#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Code Scanner Window
===================

Full screen scanning interface: live camera preview, a reticle marking the
scan window, an instruction banner and an info panel with the type and data
of the recognized code.

Only the first code of every recognition event is shown. Its outline is
drawn green when it lies entirely inside the scan window, in which case the
info panel shows its type and data, and red otherwise.
"""

import logging

from PySide6.QtCore import Qt, QRect, Slot
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import QFrame, QLabel, QMessageBox, QWidget

import config
from capture_session import CaptureInitError, CaptureSession
from reticle import ReticleWidget
from scan_geometry import contains_rect, map_points_to_view, scan_window_rect

logger = logging.getLogger(__name__)


class CodeScanner(QWidget):
    """
    Scanning window. Create it, call activate(), then show it.

    The capture pipeline starts when the window is shown and stops when it is
    hidden or closed. All display state is owned by this widget and changed on
    the UI thread only.
    """

    def __init__(self, session_factory=None, parent=None):
        """
        Args:
            session_factory: callable returning an unconfigured CaptureSession
            parent: optional parent widget
        """
        super().__init__(parent)
        self.setWindowTitle("Code Scanner")
        self.setObjectName("codeScanner")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground)
        self.setStyleSheet("#codeScanner { background-color: black; }")
        self.resize(config.SCANNER_WIDTH, config.SCANNER_HEIGHT)

        self.session_factory = session_factory or CaptureSession
        self.session = None
        self.preview = None

        # Last overlay placement, in view coordinates
        self.overlay_region = None
        self._overlay_color = config.FOCUSED_COLOR
        self._torn_down = False

        self.init_ui()

    def init_ui(self):
        """
        Create the overlay widgets. The preview is added by activate().

        Stacking, bottom to top: preview, overlay, reticle, banner, info panel.
        """
        # Recognized code outline
        self.overlay = QFrame(self)
        self.overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self._set_overlay_color(config.FOCUSED_COLOR)
        self.overlay.hide()

        # Scan window guide
        self.reticle = ReticleWidget(self)

        # ===== Instruction Banner =====
        self.instructions = QWidget(self)
        self.instructions.setAttribute(Qt.WidgetAttribute.WA_StyledBackground)
        self.instructions.setStyleSheet(f"background-color: {config.PANEL_COLOR};")
        self.instructions_label = QLabel(config.INSTRUCTIONS_TEXT, self.instructions)
        self.instructions_label.setWordWrap(True)
        self.instructions_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.instructions_label.setStyleSheet(
            f"QLabel {{ color: white; font-size: {config.LABEL_FONT_SIZE}px; background: transparent; }}")

        # ===== Code Info Panel =====
        self.code_info = QWidget(self)
        self.code_info.setAttribute(Qt.WidgetAttribute.WA_StyledBackground)
        self.code_info.setStyleSheet(f"background-color: {config.PANEL_COLOR};")

        label_style = f"QLabel {{ color: white; font-size: {config.LABEL_FONT_SIZE}px; background: transparent; }}"
        self.code_type_label = QLabel(config.CODE_TYPE_PREFIX, self.code_info)
        self.code_type_label.setStyleSheet(label_style)
        self.code_data_label = QLabel(config.CODE_DATA_PREFIX, self.code_info)
        self.code_data_label.setWordWrap(True)
        self.code_data_label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.code_data_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self.code_data_label.setStyleSheet(label_style)

        self.layout_children()

    @property
    def scan_window(self):
        """Scan window for the current size, in view coordinates."""
        return scan_window_rect(self.width(), self.height())

    @property
    def overlay_color(self):
        return self._overlay_color

    def layout_children(self):
        """Position banner, reticle and info panel around the scan window."""
        width = self.width()
        height = self.height()
        window = self.scan_window.toAlignedRect()

        if self.preview is not None:
            self.preview.setGeometry(0, 0, width, height)

        self.reticle.setGeometry(window)

        banner_bottom = max(0, window.top() - config.INSTRUCTIONS_GAP)
        self.instructions.setGeometry(0, 0, width, banner_bottom)
        # Label centre sits 20 below the banner centre
        self.instructions_label.setGeometry(20, 40, max(0, width - 40), max(0, banner_bottom - 40))

        info_top = min(height, window.bottom() + 1 + config.CODE_INFO_GAP)
        self.code_info.setGeometry(0, info_top, width, height - info_top)
        self.code_type_label.setGeometry(20, 20, max(0, width - 40), 30)
        self.code_data_label.setGeometry(20, 60, max(0, width - 40), max(0, height - info_top - 80))

    def activate(self):
        """
        Build the capture pipeline and install the preview.

        Returns:
            bool: True when scanning can start. On failure an error dialog
                  is shown and no preview is installed.
        """
        try:
            session = self.session_factory()
            session.configure()
        except CaptureInitError as e:
            logger.error(f"Capture initialization failed: {e}")
            self.show_alert("Error", str(e))
            return False

        self.session = session
        self.session.frame_signal.connect(self.update_preview)
        self.session.event_signal.connect(self.handle_recognition_event)
        self.session.error_signal.connect(self.handle_worker_error)

        # Create the preview and keep it below the overlay widgets
        self.preview = QLabel(self)
        self.preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.preview.setStyleSheet("QLabel { background-color: black; }")
        self.preview.lower()
        self.layout_children()

        logger.info("Code scanner activated")
        return True

    def start_capture(self):
        """Start scanning. No-op when already running or not activated."""
        if self.session is None:
            return
        self._torn_down = False
        self.session.start_running()

    def stop_capture(self):
        """Stop scanning. Events arriving afterwards are ignored."""
        self._torn_down = True
        if self.session is not None:
            self.session.stop_running()

    @Slot(object)
    def handle_recognition_event(self, event):
        """
        Replace the display state with the given recognition event.

        Args:
            event: RecognitionEvent from the capture session
        """
        if self._torn_down:
            return

        self.overlay.hide()
        self.overlay_region = None
        self.code_type_label.setText(config.CODE_TYPE_PREFIX)
        self.code_data_label.setText(config.CODE_DATA_PREFIX)

        code = event.first
        if code is None:
            return

        region = map_points_to_view(code.points, event.frame_size, (self.width(), self.height()))
        self._show_overlay(region)

        if contains_rect(self.scan_window, region):
            self._set_overlay_color(config.FOCUSED_COLOR)
            self.code_type_label.setText(config.CODE_TYPE_PREFIX + code.type)
            self.code_data_label.setText(config.CODE_DATA_PREFIX + (code.text or ""))
        else:
            self._set_overlay_color(config.UNFOCUSED_COLOR)

    @Slot(QImage)
    def update_preview(self, q_image):
        """
        Show a camera frame scaled to fill the window, cropping the overflow.

        Args:
            q_image: QImage frame from the capture session
        """
        if self._torn_down or self.preview is None or q_image.isNull():
            return

        size = self.preview.size()
        scaled = QPixmap.fromImage(q_image).scaled(
            size,
            Qt.AspectRatioMode.KeepAspectRatioByExpanding,
            Qt.TransformationMode.FastTransformation
        )
        x = (scaled.width() - size.width()) // 2
        y = (scaled.height() - size.height()) // 2
        self.preview.setPixmap(scaled.copy(QRect(x, y, size.width(), size.height())))

    @Slot(str)
    def handle_worker_error(self, error_message):
        """
        Handle errors from the worker thread.

        Args:
            error_message: Error description
        """
        if self._torn_down:
            return
        logger.error(f"Worker error: {error_message}")
        self.stop_capture()
        self.show_alert("Error", error_message)

    def show_alert(self, title, message):
        QMessageBox.critical(self, title, message)

    def _show_overlay(self, region):
        self.overlay_region = region
        rect = region.toAlignedRect()
        # Keep degenerate (flat) barcode outlines visible
        minimum = 2 * config.OVERLAY_BORDER_WIDTH
        rect.setWidth(max(rect.width(), minimum))
        rect.setHeight(max(rect.height(), minimum))
        self.overlay.setGeometry(rect)
        self.overlay.show()

    def _set_overlay_color(self, color):
        self._overlay_color = color
        self.overlay.setStyleSheet(
            f"QFrame {{ border: {config.OVERLAY_BORDER_WIDTH}px solid {color}; background: transparent; }}")

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.layout_children()

    def showEvent(self, event):
        super().showEvent(event)
        self.start_capture()

    def hideEvent(self, event):
        self.stop_capture()
        super().hideEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            self.close()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        """
        Stop scanning and release the camera when the window closes.
        """
        self.stop_capture()
        if self.session is not None:
            self.session.release()
        event.accept()
