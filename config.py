#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration File
==================

Customize these settings for your application.
"""

# Camera Settings
CAMERA_INDEX = 0  # OpenCV device index of the scanning camera
CAPTURE_WIDTH = 1280  # Requested frame size, the device may pick another
CAPTURE_HEIGHT = 720
FRAME_READ_ATTEMPTS = 5  # Reads tried during activation before giving up

# Recognition Settings
RECOGNITION_INTERVAL = 3  # Process every Nth frame (1 = every frame)
RECOGNITION_QUEUE_SIZE = 2
ENABLE_QR_DETECTION = True
ENABLE_BARCODE_DETECTION = True

# Barcode symbologies handed to zbar (names of pyzbar.ZBarSymbol members).
# QR codes are decoded by OpenCV and always reported as "QR".
SYMBOLOGIES = [
    "UPCE", "EAN13", "EAN8", "CODE93", "CODE128", "PDF417", "I25",
    "CODE39", "CODABAR", "DATABAR", "DATABAR_EXP",
]

# Scan Window / Reticle
SCAN_WINDOW_WIDTH_RATIO = 0.8
RETICLE_SCALE = 0.2  # Bracket length as a fraction of the side
RETICLE_CORNER_RADIUS = 10.0
RETICLE_LINE_WIDTH = 2

# Overlay
OVERLAY_BORDER_WIDTH = 2
FOCUSED_COLOR = "#00ff00"
UNFOCUSED_COLOR = "#ff0000"

# UI Settings
WINDOW_WIDTH = 480
WINDOW_HEIGHT = 320
SCANNER_WIDTH = 430  # Used when the scanner is not shown full screen
SCANNER_HEIGHT = 930
SCANNER_FULL_SCREEN = True
PANEL_COLOR = "rgba(0, 0, 0, 153)"
LABEL_FONT_SIZE = 20
INSTRUCTIONS_TEXT = "Position bar or QR code within rectangle to scan"
CODE_TYPE_PREFIX = "Code Type: "
CODE_DATA_PREFIX = "Data: "
INSTRUCTIONS_GAP = 150  # Space between banner and scan window
CODE_INFO_GAP = 100  # Space between scan window and info panel

# Permission Settings
# Opened from the permission dialog; None disables the link.
CAMERA_SETTINGS_URL = "ms-settings:privacy-webcam"

# Logging
APP_LOG_FILE = "camera_app.log"
WORKER_LOG_FILE = "camera_worker.log"
RECOGNITION_LOG_FILE = "code_recognition.log"
