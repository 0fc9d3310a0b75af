#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Scan Geometry Module
====================

Coordinate helpers shared by the preview and the code overlay:
- scan window placement inside the scanner view
- aspect-fill mapping from camera frame coordinates to view coordinates
- rectangle containment used to decide whether a code is in focus
"""

from PySide6.QtCore import QPointF, QRectF

import config


def scan_window_rect(view_width, view_height, width_ratio=None):
    """
    Compute the scan window for a view of the given size.

    The window is centred, its width is a fixed fraction of the view width
    and its height is one point taller than its width.

    Returns:
        QRectF: scan window in view coordinates
    """
    if width_ratio is None:
        width_ratio = config.SCAN_WINDOW_WIDTH_RATIO

    width = view_width * width_ratio
    height = width + 1
    left = (view_width - width) / 2.0
    top = (view_height - height) / 2.0
    return QRectF(left, top, width, height)


def aspect_fill_transform(frame_size, view_size):
    """
    Scale and offset that map a frame onto a view, filling the view and
    cropping the overflow evenly on both sides.

    Args:
        frame_size: (width, height) of the camera frame
        view_size: (width, height) of the view

    Returns:
        tuple: (scale, offset_x, offset_y)
    """
    frame_width, frame_height = frame_size
    view_width, view_height = view_size
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError(f"Invalid frame size: {frame_size}")

    scale = max(view_width / frame_width, view_height / frame_height)
    offset_x = (view_width - frame_width * scale) / 2.0
    offset_y = (view_height - frame_height * scale) / 2.0
    return scale, offset_x, offset_y


def map_points_to_view(points, frame_size, view_size):
    """
    Transform frame-coordinate points into view coordinates and return their
    bounding rectangle.

    Returns:
        QRectF: bounding region in view coordinates
    """
    scale, offset_x, offset_y = aspect_fill_transform(frame_size, view_size)
    mapped = [QPointF(x * scale + offset_x, y * scale + offset_y) for x, y in points]

    left = min(p.x() for p in mapped)
    top = min(p.y() for p in mapped)
    right = max(p.x() for p in mapped)
    bottom = max(p.y() for p in mapped)
    return QRectF(QPointF(left, top), QPointF(right, bottom))


def contains_rect(outer, inner):
    """
    True when `inner` lies entirely within `outer`, edges included.

    QRectF.contains() rejects rectangles with zero width or height, which
    zbar reports for some linear barcodes, so the edges are compared directly.
    """
    return (inner.left() >= outer.left()
            and inner.top() >= outer.top()
            and inner.right() <= outer.right()
            and inner.bottom() <= outer.bottom())
