#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Capture Session Module
======================

Owns the capture pipeline of one scanner: the camera device, the code
recognizer and the worker thread that drives them.

Workflow:
1. configure(): open camera -> verify frames arrive -> attach recognizer
2. start_running(): launch the worker thread (no-op when already running)
3. stop_running(): stop and wait for the worker (no-op when stopped)
4. release(): stop and close the camera
"""

import logging

import cv2
from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QImage

import config
from camera_worker import CaptureWorker
from code_recognition import CodeRecognizer

logger = logging.getLogger(__name__)


class CaptureInitError(Exception):
    """The capture device, its input or the recognition output could not be set up."""


def open_camera(index):
    """
    Open an OpenCV camera device and request the configured resolution.

    Args:
        index: OpenCV device index

    Returns:
        cv2.VideoCapture (may be unopened, check isOpened())
    """
    capture = cv2.VideoCapture(index)
    if capture.isOpened():
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.CAPTURE_WIDTH)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.CAPTURE_HEIGHT)
    return capture


class CaptureSession(QObject):
    """
    A single capture pipeline.

    Signals are re-emitted from the worker on the thread that owns the
    session, so slots connected to them run on the UI thread.

    Signals:
        frame_signal: Emits QImage preview frames
        event_signal: Emits RecognitionEvent values in capture order
        error_signal: Emits runtime errors from the worker
    """

    frame_signal = Signal(QImage)
    event_signal = Signal(object)
    error_signal = Signal(str)

    def __init__(self, device_factory=None, recognizer_factory=None, camera_index=None, parent=None):
        super().__init__(parent)
        self.device_factory = device_factory or open_camera
        self.recognizer_factory = recognizer_factory or CodeRecognizer
        self.camera_index = config.CAMERA_INDEX if camera_index is None else camera_index

        self.capture = None
        self.recognizer = None
        self.frame_size = None
        self.worker = None

    @property
    def is_configured(self):
        return self.capture is not None

    @property
    def is_running(self):
        return self.worker is not None and self.worker.isRunning()

    def configure(self):
        """
        Open the camera and attach the recognizer.

        Raises:
            CaptureInitError: when the device, its input or the output
                cannot be created. Nothing is left open on failure.
        """
        logger.info(f"Opening capture device {self.camera_index}")
        capture = self.device_factory(self.camera_index)
        if capture is None or not capture.isOpened():
            self._release_device(capture)
            raise CaptureInitError("Unable to create capture device")

        frame = None
        for _ in range(max(1, config.FRAME_READ_ATTEMPTS)):
            ok, frame = capture.read()
            if ok and frame is not None:
                break
            frame = None
        if frame is None:
            self._release_device(capture)
            raise CaptureInitError("Unable to create capture device input")

        recognizer = self.recognizer_factory()
        if not recognizer.has_engines:
            self._release_device(capture)
            raise CaptureInitError("Unable to add capture metadata output")

        height, width = frame.shape[:2]
        self.capture = capture
        self.recognizer = recognizer
        self.frame_size = (width, height)
        logger.info(f"Capture device ready, frame size {width}x{height}")

    def start_running(self):
        """Start the worker thread unless it is already running."""
        if not self.is_configured:
            logger.warning("start_running() called before configure()")
            return
        if self.is_running:
            return

        self.worker = CaptureWorker(self.capture, self.recognizer)
        self.worker.image_signal.connect(self.frame_signal)
        self.worker.event_signal.connect(self.event_signal)
        self.worker.error_signal.connect(self.error_signal)
        self.worker.status_signal.connect(self._log_status)
        self.worker.start()
        logger.info("Capture session started")

    def stop_running(self):
        """Stop the worker thread and wait for it. No-op when stopped."""
        if self.worker is None:
            return

        worker = self.worker
        self.worker = None

        # Disconnect signals first to prevent queued signals from reaching the UI
        worker.image_signal.disconnect(self.frame_signal)
        worker.event_signal.disconnect(self.event_signal)
        worker.error_signal.disconnect(self.error_signal)

        worker.stop()
        worker.wait(5000)  # Wait up to 5 seconds for thread to finish

        if worker.isRunning():
            logger.warning("Worker thread kept running after stop request")
            worker.terminate()
            worker.wait()

        logger.info("Capture session stopped")

    def release(self):
        """Stop the pipeline and close the camera."""
        self.stop_running()
        self._release_device(self.capture)
        self.capture = None
        self.recognizer = None

    def _release_device(self, capture):
        if capture is not None:
            capture.release()

    def _log_status(self, message):
        logger.info(message)
