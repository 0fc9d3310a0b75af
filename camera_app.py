#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Camera Code Scanner Application
===============================

This is the main application file that creates the start window and hands
control to the code scanner once camera access is authorized.

Architecture:
- UI Thread (Main): Handles user interface and user interactions
- Worker Thread: Handles camera operations and image processing
- Signal-based communication between threads for thread safety

Workflow:
1. Startup: Show the start window
2. Get Started: Check camera authorization, ask for it when undetermined
3. Authorized: Open camera -> Show scanner -> Stream and recognize codes
4. Scanner closed: Stop streaming -> Release camera
"""

import sys
import logging

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QPushButton, QLabel, QMessageBox
)
from PySide6.QtCore import Qt, Signal, Slot, QUrl
from PySide6.QtGui import QDesktopServices

import config
from camera_permission import AuthorizationStatus, QtCameraPermission
from code_scanner import CodeScanner

ACCESS_MESSAGE = "This app is unable to access the camera. Please turn on camera access in settings."


class CameraCodeScannerApp(QMainWindow):
    """
    Start window of the application.

    This class manages:
    - Camera authorization checks
    - Permission dialogs
    - Creating and presenting the code scanner
    """

    # Emitted when a permission request is granted, possibly from another thread
    access_granted = Signal()

    def __init__(self, permission=None, scanner_factory=None):
        """
        Args:
            permission: camera permission provider, defaults to QtCameraPermission
            scanner_factory: callable returning a CodeScanner
        """
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.setWindowTitle("Code Scanner")
        self.resize(config.WINDOW_WIDTH, config.WINDOW_HEIGHT)

        self.permission = permission or QtCameraPermission()
        self.scanner_factory = scanner_factory or CodeScanner
        self.scanner = None

        self.access_granted.connect(self.proceed_with_scanner_display)

        self.init_ui()

    def init_ui(self):
        """
        Initialize the user interface components.
        """
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)

        title_label = QLabel("Code Scanner")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title_label.setStyleSheet("QLabel { font-size: 28px; font-weight: bold; }")
        main_layout.addWidget(title_label)

        description_label = QLabel("Scan bar codes and QR codes with your camera.")
        description_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        description_label.setWordWrap(True)
        main_layout.addWidget(description_label)

        self.start_btn = QPushButton("Get Started!")
        self.start_btn.clicked.connect(self.display_code_scanner)
        main_layout.addWidget(self.start_btn)

        main_layout.addStretch()

        self.statusBar().showMessage("Ready")

    @Slot()
    def display_code_scanner(self):
        """
        Display the scanning interface if camera access is authorized.

        Authorization is checked here rather than in CodeScanner, which is
        only responsible for scanning.
        """
        status = self.permission.authorization_status()
        self.logger.info(f"Camera authorization status: {status.value}")

        if status == AuthorizationStatus.AUTHORIZED:
            self.proceed_with_scanner_display()

        elif status == AuthorizationStatus.DENIED:
            self.show_access_alert("Access Denied", ACCESS_MESSAGE)

        elif status == AuthorizationStatus.RESTRICTED:
            self.show_access_alert("Access Restricted", ACCESS_MESSAGE)

        else:
            self.statusBar().showMessage("Requesting camera access...")
            self.permission.request_access(self._on_access_result)

    def _on_access_result(self, granted):
        if granted:
            self.access_granted.emit()
        else:
            self.logger.warning("Camera access request was declined")

    @Slot()
    def proceed_with_scanner_display(self):
        """
        Create, activate and present the code scanner.
        """
        if self.scanner is not None and self.scanner.isVisible():
            self.scanner.raise_()
            self.scanner.activateWindow()
            return

        scanner = self.scanner_factory()
        if not scanner.activate():
            self.statusBar().showMessage("Camera unavailable")
            scanner.deleteLater()
            return

        self.scanner = scanner
        if config.SCANNER_FULL_SCREEN:
            scanner.showFullScreen()
        else:
            scanner.show()
        self.statusBar().showMessage("Scanning")

    def show_access_alert(self, title, message):
        """
        Explain that camera access is missing and open the system settings.
        """
        self.logger.warning(f"{title}: camera access unavailable")
        self.statusBar().showMessage(title)
        QMessageBox.warning(self, title, message)

        if config.CAMERA_SETTINGS_URL:
            QDesktopServices.openUrl(QUrl(config.CAMERA_SETTINGS_URL))

    def closeEvent(self, event):
        """
        Close the scanner, if open, together with the start window.
        """
        if self.scanner is not None:
            self.scanner.close()
            self.scanner = None
        event.accept()


def main():
    """
    Application entry point.
    """
    logging.basicConfig(
        filename=config.APP_LOG_FILE,
        filemode='w',
        format='%(asctime)s - %(levelname)s - %(message)s',
        level=logging.INFO
    )

    app = QApplication(sys.argv)

    # Set application style
    app.setStyle("Fusion")

    # Create and show main window
    window = CameraCodeScannerApp()
    window.show()

    # Start event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
