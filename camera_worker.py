#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Camera Worker Thread Module
============================

This module implements the worker thread that handles:
- Camera frame acquisition (cv2.VideoCapture.read)
- Image format conversion (OpenCV BGR to QImage)
- QR/Barcode recognition on a separate recognition thread
- Signal emission to UI thread

Thread Safety:
- Runs in separate thread to avoid blocking UI
- Uses Qt signals for thread-safe communication; the UI receives
  recognition events through a queued connection, one at a time and in
  capture order
- Proper resource cleanup in finally block
"""

import queue
import threading
import logging

import cv2
from PySide6.QtCore import QThread, Signal
from PySide6.QtGui import QImage

import config
from code_recognition import RecognitionEvent


class CaptureWorker(QThread):
    """
    Worker thread for camera operations and image processing.

    Signals:
        image_signal: Emits QImage for the live preview
        event_signal: Emits a RecognitionEvent for every recognized frame
        error_signal: Emits error messages
        status_signal: Emits status messages for logging
    """

    # Define signals for thread-safe communication
    image_signal = Signal(QImage)
    event_signal = Signal(object)
    error_signal = Signal(str)
    status_signal = Signal(str)

    def __init__(self, capture, recognizer):
        """
        Initialize the camera worker.

        Args:
            capture: cv2.VideoCapture instance (already opened)
            recognizer: CodeRecognizer used on sampled frames
        """
        super().__init__()
        # Create a dedicated logger for this module
        self.logger = logging.getLogger(__name__)
        self.logger.setLevel(logging.INFO)

        # Create file handler if not already exists
        if not self.logger.handlers:
            file_handler = logging.FileHandler(config.WORKER_LOG_FILE, mode='w')
            file_handler.setLevel(logging.INFO)
            formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
        self.capture = capture
        self.recognizer = recognizer
        self.running = False

        # Async recognition queue and thread
        self.recognition_queue = queue.Queue(maxsize=config.RECOGNITION_QUEUE_SIZE)
        self.recognition_thread = None
        self.recognition_running = False

        # Frame skip counter for recognition
        self.frame_count = 0
        self.recognition_interval = max(1, config.RECOGNITION_INTERVAL)

        # Consecutive failed reads tolerated before giving up
        self.max_read_failures = max(1, config.FRAME_READ_ATTEMPTS) * 10

    def run(self):
        """
        Main worker thread loop.

        Workflow:
        1. Start async recognition thread
        2. Read frames until stopped
        3. Emit each frame for display, queue every Nth frame for recognition
        4. Cleanup: Stop recognition thread
        """
        self.running = True
        read_failures = 0

        try:
            # Step 1: Start async recognition thread
            self.status_signal.emit("Starting recognition thread...")
            self.recognition_running = True
            self.recognition_thread = threading.Thread(target=self._recognition_worker, daemon=True)
            self.recognition_thread.start()
            self.logger.info("Recognition thread started")

            # Step 2: Read frames until stopped
            self.status_signal.emit("Frame acquisition started")
            while self.running:
                ok, frame = self.capture.read()
                if not ok or frame is None:
                    read_failures += 1
                    if read_failures >= self.max_read_failures:
                        self.error_signal.emit("Lost connection to the capture device")
                        self.logger.error(f"Frame read failed {read_failures} times in a row")
                        break
                    self.msleep(10)
                    continue
                read_failures = 0

                # Step 3: Emit for display, queue for recognition
                q_image = self._convert_to_qimage(frame)
                if q_image is not None:
                    self.image_signal.emit(q_image)

                self.frame_count += 1
                if self.frame_count % self.recognition_interval == 0:
                    try:
                        # Non-blocking put, discard if queue is full
                        self.recognition_queue.put_nowait(frame.copy())
                    except queue.Full:
                        self.logger.debug("Recognition queue full, skipping frame")

        except Exception as e:
            self.error_signal.emit(f"Critical error in worker thread: {str(e)}")
            self.logger.exception("Critical error in worker thread")

        finally:
            # Step 4: Cleanup - Always executed
            self._cleanup()

    def _recognition_worker(self):
        """
        Async recognition worker thread.

        Processes frames from recognition queue without blocking display.
        """
        self.logger.info("Recognition worker started")

        while self.recognition_running:
            try:
                # Wait for frame with timeout
                frame = self.recognition_queue.get(timeout=0.5)
            except queue.Empty:
                continue

            try:
                event = self.recognizer.detect(frame)
            except Exception as e:
                self.logger.error(f"Recognition worker error: {str(e)}")
                height, width = frame.shape[:2]
                event = RecognitionEvent(codes=(), frame_size=(width, height))

            if self.recognition_running:
                self.event_signal.emit(event)

        self.logger.info("Recognition worker stopped")

    def _convert_to_qimage(self, bgr_image):
        """
        Convert BGR image to QImage for Qt display.

        Args:
            bgr_image: BGR image (numpy array)

        Returns:
            QImage object or None
        """
        try:
            rgb_image = cv2.cvtColor(bgr_image, cv2.COLOR_BGR2RGB)
            height, width, channels = rgb_image.shape
            bytes_per_line = channels * width

            q_image = QImage(
                rgb_image.tobytes(),
                width,
                height,
                bytes_per_line,
                QImage.Format.Format_RGB888
            )

            return q_image.copy()  # Detach from the temporary buffer

        except Exception as e:
            self.status_signal.emit(f"QImage conversion error: {str(e)}")
            return None

    def stop(self):
        """
        Signal the worker thread to stop.
        """
        self.status_signal.emit("Stop signal received")
        self.running = False
        self.recognition_running = False  # Stop recognition thread

    def _cleanup(self):
        """
        Stop the recognition thread.

        Always called in finally block to ensure proper resource release.
        """
        self.recognition_running = False
        if self.recognition_thread and self.recognition_thread.is_alive():
            self.recognition_thread.join(timeout=2.0)
            self.logger.info("Recognition thread stopped")

        self.logger.info("Worker thread cleanup completed")
