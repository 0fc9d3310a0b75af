#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
QR Code and Barcode Recognition Module
=======================================

This module provides QR code and barcode detection functionality using:
- OpenCV's QRCodeDetector (QR codes)
- pyzbar library (linear and stacked barcodes)

Every call to CodeRecognizer.detect() produces one RecognitionEvent holding
all codes found in the frame, QR codes first, then barcodes.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

import cv2
import numpy as np

import config

try:
    from pyzbar import pyzbar
    from pyzbar.pyzbar import ZBarSymbol
    PYZBAR_AVAILABLE = True
except ImportError:
    PYZBAR_AVAILABLE = False

# Configure module logger
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Create file handler if not already exists
if not logger.handlers:
    file_handler = logging.FileHandler(config.RECOGNITION_LOG_FILE, mode='a')
    file_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

if not PYZBAR_AVAILABLE:
    logger.warning("pyzbar not available. Barcode detection disabled.")

Point = Tuple[float, float]


@dataclass(frozen=True)
class RecognizedCode:
    """A single code found in a frame, positioned in frame coordinates."""

    type: str
    text: Optional[str]
    points: Tuple[Point, ...]

    @property
    def bounds(self):
        """Axis-aligned bounding box as (left, top, right, bottom)."""
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)


@dataclass(frozen=True)
class RecognitionEvent:
    """One frame's report. `codes` may be empty."""

    codes: Tuple[RecognizedCode, ...]
    frame_size: Tuple[int, int]  # (width, height)

    @property
    def first(self):
        return self.codes[0] if self.codes else None


class CodeRecognizer:
    """
    QR Code and Barcode recognition engine.

    Supports:
    - QR codes (via OpenCV QRCodeDetector)
    - Barcodes (via pyzbar: EAN, UPC, Code128, PDF417, etc.)
    """

    def __init__(self, symbologies=None, enable_qr=None, enable_barcodes=None):
        """
        Initialize recognition engines.

        Args:
            symbologies: pyzbar symbol names to decode, defaults to config.SYMBOLOGIES
            enable_qr: toggle QR detection, defaults to config.ENABLE_QR_DETECTION
            enable_barcodes: toggle barcode detection, defaults to config.ENABLE_BARCODE_DETECTION
        """
        if enable_qr is None:
            enable_qr = config.ENABLE_QR_DETECTION
        if enable_barcodes is None:
            enable_barcodes = config.ENABLE_BARCODE_DETECTION
        if symbologies is None:
            symbologies = config.SYMBOLOGIES

        self.qr_detector = None
        self.qr_available = False
        if enable_qr:
            try:
                self.qr_detector = cv2.QRCodeDetector()
                self.qr_available = True
            except cv2.error as e:
                logger.warning(f"OpenCV QRCodeDetector not available. QR detection disabled: {e}")

        self.symbols = []
        self.barcodes_available = False
        if enable_barcodes and PYZBAR_AVAILABLE:
            for name in symbologies:
                symbol = getattr(ZBarSymbol, name, None)
                if symbol is None or symbol == ZBarSymbol.QRCODE:
                    logger.warning(f"Ignoring unsupported barcode symbology: {name}")
                    continue
                self.symbols.append(symbol)
            self.barcodes_available = bool(self.symbols)

        self.last_result = None  # For log deduplication

    @property
    def has_engines(self):
        return self.qr_available or self.barcodes_available

    def detect(self, image):
        """
        Detect QR codes and barcodes in image.

        Args:
            image: OpenCV image (numpy array, BGR format)

        Returns:
            RecognitionEvent: codes found in the frame, possibly none
        """
        codes = []

        if self.qr_available:
            codes.extend(self._detect_qr_codes(image))

        if self.barcodes_available:
            codes.extend(self._detect_barcodes(image))

        if codes:
            combined = ", ".join(f"{code.type}:{code.text}" for code in codes)
            if combined != self.last_result:
                self.last_result = combined
                logger.info(f"Detected codes: {combined}")
        else:
            self.last_result = None

        height, width = image.shape[:2]
        return RecognitionEvent(codes=tuple(codes), frame_size=(width, height))

    def _detect_qr_codes(self, image):
        """
        Detect QR codes using OpenCV QRCodeDetector.

        Args:
            image: OpenCV image

        Returns:
            list: RecognizedCode entries of type 'QR'
        """
        try:
            found, texts, points, _ = self.qr_detector.detectAndDecodeMulti(image)
            if not found or points is None:
                return []

            codes = []
            for text, corners in zip(texts, points):
                if not text:  # Located but not decoded
                    continue
                codes.append(RecognizedCode(
                    type='QR',
                    text=text,
                    points=tuple((float(x), float(y)) for x, y in np.asarray(corners).reshape(-1, 2)),
                ))
            return codes

        except cv2.error as e:
            logger.exception(f"QR detection error: {e}")
            return []

    def _detect_barcodes(self, image):
        """
        Detect barcodes using pyzbar.

        Args:
            image: OpenCV image

        Returns:
            list: RecognizedCode entries typed with the zbar symbology name
        """
        try:
            barcodes = pyzbar.decode(image, symbols=self.symbols)

            codes = []
            for barcode in barcodes:
                if barcode.type == "QRCODE":  # Avoid duplicates with QR detection
                    continue

                points = tuple((float(p.x), float(p.y)) for p in barcode.polygon)
                if not points:
                    left, top, width, height = barcode.rect
                    points = ((left, top), (left + width, top + height))

                codes.append(RecognizedCode(
                    type=barcode.type,
                    text=barcode.data.decode('utf-8', errors='replace'),
                    points=points,
                ))
            return codes

        except Exception as e:
            logger.exception(f"Barcode detection error: {e}")
            return []
