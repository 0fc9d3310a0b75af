#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Camera Permission Module
========================

Wraps Qt's camera permission API behind a small provider interface:

    status = provider.authorization_status()
    provider.request_access(callback)   # callback(granted: bool)

The callback may run on any thread.
"""

from enum import Enum
import logging

from PySide6.QtCore import QCameraPermission, QCoreApplication, Qt

logger = logging.getLogger(__name__)


class AuthorizationStatus(Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"
    NOT_DETERMINED = "not_determined"


class QtCameraPermission:
    """Camera permission provider backed by QCoreApplication.checkPermission()."""

    def authorization_status(self):
        """
        Returns:
            AuthorizationStatus: current camera authorization
        """
        status = QCoreApplication.instance().checkPermission(QCameraPermission())
        if status == Qt.PermissionStatus.Granted:
            return AuthorizationStatus.AUTHORIZED
        if status == Qt.PermissionStatus.Denied:
            return AuthorizationStatus.DENIED
        return AuthorizationStatus.NOT_DETERMINED

    def request_access(self, callback):
        """
        Ask the user for camera access.

        Args:
            callback: called once with True when access was granted
        """
        app = QCoreApplication.instance()
        permission = QCameraPermission()

        def on_result(*args):
            granted = app.checkPermission(permission) == Qt.PermissionStatus.Granted
            logger.info(f"Camera permission request finished, granted={granted}")
            callback(granted)

        app.requestPermission(permission, app, on_result)
