#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Reticle Module
==============

Draws the scanning guide: four rounded corner brackets with gaps along each
edge. The shape is a pure function of the widget size and is rebuilt on every
paint, so it always follows the current bounds.
"""

from PySide6.QtCore import Qt, QPointF, QRectF
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QWidget

import config


def reticle_brackets(width, height, scale=None):
    """
    Describe the four corner brackets of a width x height reticle.

    Each bracket starts on the vertical side at `scale` of the height away from
    its corner, turns at the corner and ends on the horizontal side at `scale`
    of the width away from it.

    Returns:
        list: four (start, corner, end) QPointF triples in the order
              top-left, bottom-left, top-right, bottom-right
    """
    if scale is None:
        scale = config.RETICLE_SCALE

    dy = height * scale
    dx = width * scale
    return [
        (QPointF(0, dy), QPointF(0, 0), QPointF(dx, 0)),
        (QPointF(0, height - dy), QPointF(0, height), QPointF(dx, height)),
        (QPointF(width, dy), QPointF(width, 0), QPointF(width - dx, 0)),
        (QPointF(width, height - dy), QPointF(width, height), QPointF(width - dx, height)),
    ]


def reticle_path(width, height, scale=None, radius=None):
    """
    Build the reticle outline as four open subpaths.

    Args:
        width, height: size of the area the reticle is drawn in
        scale: bracket length as a fraction of the side
        radius: corner radius

    Returns:
        QPainterPath
    """
    if radius is None:
        radius = config.RETICLE_CORNER_RADIUS

    path = QPainterPath()
    for start, corner, end in reticle_brackets(width, height, scale):
        # +1 when the bracket extends right/down from its corner, -1 otherwise
        sx = 1 if end.x() > corner.x() else -1
        sy = 1 if start.y() > corner.y() else -1

        center = QPointF(corner.x() + sx * radius, corner.y() + sy * radius)
        start_angle = 180.0 if sx > 0 else 0.0
        end_angle = 90.0 if sy > 0 else -90.0
        sweep = end_angle - start_angle
        if sweep < -180.0:
            sweep += 360.0

        path.moveTo(start)
        path.lineTo(corner.x(), center.y())
        path.arcTo(QRectF(center.x() - radius, center.y() - radius, 2 * radius, 2 * radius),
                   start_angle, sweep)
        path.lineTo(end)

    return path


class ReticleWidget(QWidget):
    """Transparent widget that strokes the reticle over the scan window."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)

    def paintEvent(self, event):
        radius = config.RETICLE_CORNER_RADIUS

        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        clip = QPainterPath()
        clip.addRoundedRect(QRectF(self.rect()), radius, radius)
        painter.setClipPath(clip)

        pen = QPen(QColor(Qt.GlobalColor.white))
        pen.setWidth(config.RETICLE_LINE_WIDTH)
        pen.setCapStyle(Qt.PenCapStyle.SquareCap)
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.drawPath(reticle_path(self.width(), self.height()))
        painter.end()
