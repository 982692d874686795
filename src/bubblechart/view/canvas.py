"""
Bubble Canvas (Qt Graphics View)
Render surface of the bubble chart: draws circles and wrapped labels, applies
the viewport transform to the whole scene and forwards pointer, wheel, hover
and resize events to the SceneController.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QPoint, QPointF, Qt, QTimer
from PySide6.QtGui import QBrush, QColor, QFont, QFontMetricsF, QPainter, QPen, QTextOption, QTransform
from PySide6.QtWidgets import (
    QGraphicsEllipseItem, QGraphicsItem, QGraphicsRectItem, QGraphicsScene, QGraphicsTextItem,
    QGraphicsView, QToolTip, QWidget
)

from bubblechart.config import FOCAL_STROKE, FOCAL_TEXT, LABEL_MAX_LINES, LABEL_TEXT, ScaleConfig
from bubblechart.controller.scene import SceneController
from bubblechart.model.body import Body, Point, Size
from bubblechart.model.simulation import SimulationState
from bubblechart.model.truncation import LabelBox, Tooltip
from bubblechart.model.viewport import ViewportTransform

logger = logging.getLogger(__name__)

LABEL_PADDING = 5.0


# -------------------------------------------------------------------------------
# Items
# -------------------------------------------------------------------------------

class BubbleItem(QGraphicsEllipseItem):
    """
    One bubble: a circle centred on the body position, with a clipped label
    container of side `radius * label_box_ratio` holding word-wrapped text.
    """
    def __init__(
        self,
        body: Body,
        fill: str,
        label_box_ratio: float = ScaleConfig.label_box_ratio,
        parent: Optional[QGraphicsItem] = None,
    ) -> None:
        r = body.radius
        super().__init__(-r, -r, 2 * r, 2 * r, parent)
        self.body_id = body.id

        self.setBrush(QBrush(QColor(fill)))
        if body.is_focal:
            self.setPen(QPen(QColor(FOCAL_STROKE), 2))
            self.setZValue(1)
        else:
            self.setPen(QPen(Qt.PenStyle.NoPen))

        font = QFont()
        font.setPointSizeF(11.0 if body.is_focal else 9.0)
        font.setBold(body.is_focal)

        # container: square box, height capped at the maximum visible line count
        side = r * label_box_ratio
        line_height = QFontMetricsF(font).lineSpacing()
        height = min(side, LABEL_MAX_LINES * line_height + 2 * LABEL_PADDING)
        self.container = QGraphicsRectItem(-side / 2, -height / 2, side, height, self)
        self.container.setPen(QPen(Qt.PenStyle.NoPen))
        self.container.setFlag(QGraphicsItem.GraphicsItemFlag.ItemClipsChildrenToShape, True)

        self.label = QGraphicsTextItem(self.container)
        self.label.setFont(font)
        self.label.setDefaultTextColor(QColor(FOCAL_TEXT if body.is_focal else LABEL_TEXT))
        option = QTextOption(Qt.AlignmentFlag.AlignHCenter)
        option.setWrapMode(QTextOption.WrapMode.WordWrap)
        self.label.document().setDefaultTextOption(option)
        self.label.document().setDocumentMargin(0)
        self.label.setTextWidth(max(1.0, side - 2 * LABEL_PADDING))
        self.label.setPlainText(body.label)
        self._center_label()

    def _center_label(self) -> None:
        rect = self.container.rect()
        doc_height = self.label.document().size().height()
        text_width = self.label.textWidth()
        y = -min(doc_height, rect.height() - 2 * LABEL_PADDING) / 2
        self.label.setPos(-text_width / 2, y)

    def covers(self, scene_pos: QPointF) -> bool:
        """Hit test against the circle only; the label box corners stick out past it."""
        return self.contains(self.mapFromScene(scene_pos))

    def measure(self, scale: float) -> LabelBox:
        """Natural content extent vs allotted container extent, in screen pixels."""
        doc = self.label.document()
        content = Size(
            (doc.idealWidth() + 2 * LABEL_PADDING) * scale,
            (doc.size().height() + 2 * LABEL_PADDING) * scale,
        )
        rect = self.container.rect()
        container = Size(rect.width() * scale, rect.height() * scale)
        return LabelBox(self.body_id, content, container)


# -------------------------------------------------------------------------------
# Canvas widget
# -------------------------------------------------------------------------------

class BubbleCanvas(QGraphicsView):
    def __init__(self, controller: SceneController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.controller = controller

        self._scene = QGraphicsScene(self)
        self._scene.setBackgroundBrush(QBrush(QColor("white")))
        self.setScene(self._scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setMouseTracking(True)

        # root group carrying the viewport transform
        self._root = QGraphicsRectItem()
        self._root.setPen(QPen(Qt.PenStyle.NoPen))
        self._scene.addItem(self._root)

        self._items: dict[str, BubbleItem] = {}
        self._hovered: Optional[str] = None

        # debounce resize -> re-seed
        self._resize_timer = QTimer(self)
        self._resize_timer.setSingleShot(True)
        self._resize_timer.setInterval(100)
        self._resize_timer.timeout.connect(self._push_viewport_size)

        controller.simulation_reset.connect(self._rebuild)
        controller.ticked.connect(self._sync_positions)
        controller.transform_changed.connect(self._apply_transform)
        controller.truncation_requested.connect(self._schedule_measure)
        controller.tooltip_changed.connect(self._show_tooltip)

        if controller.state is not None:
            self._rebuild(controller.state)
        self._apply_transform(controller.transform)

    # ------------------------------------------------------------------------------
    # Controller -> view
    # ------------------------------------------------------------------------------

    def _rebuild(self, state: SimulationState) -> None:
        """Tear down all bubble items and create them for the new state."""
        for item in self._items.values():
            item.setParentItem(None)
            self._scene.removeItem(item)
        self._items.clear()
        self._hovered = None

        ratio = self.controller.scale_config.label_box_ratio
        for body in state.bodies:
            item = BubbleItem(body, self.controller.color_for(body.id), ratio, parent=self._root)
            item.setPos(body.x, body.y)
            self._items[body.id] = item

    def _sync_positions(self, state: SimulationState) -> None:
        for body in state.bodies:
            item = self._items.get(body.id)
            if item is not None:
                item.setPos(body.x, body.y)

    def _apply_transform(self, transform: ViewportTransform) -> None:
        s = transform.scale
        self._root.setTransform(QTransform(s, 0.0, 0.0, s, transform.offset_x, transform.offset_y))

    def _schedule_measure(self) -> None:
        # measure after Qt has laid out the text documents
        QTimer.singleShot(0, self._measure_labels)

    def _measure_labels(self) -> None:
        scale = self.controller.transform.scale
        boxes = [item.measure(scale) for item in self._items.values()]
        truncated = self.controller.update_truncation(boxes)
        logger.debug(f"{len(truncated)} of {len(boxes)} labels truncated.")

    def _show_tooltip(self, tooltip: Optional[Tooltip]) -> None:
        if tooltip is None:
            QToolTip.hideText()
            return
        x, y = tooltip.position
        QToolTip.showText(self.mapToGlobal(QPoint(int(x) + 12, int(y) + 12)), tooltip.text, self)

    # ------------------------------------------------------------------------------
    # View -> controller
    # ------------------------------------------------------------------------------

    def _body_at(self, pos: QPointF) -> Optional[str]:
        view_pos = pos.toPoint()
        scene_pos = self.mapToScene(view_pos)
        for item in self.items(view_pos):
            while item is not None and not isinstance(item, BubbleItem):
                item = item.parentItem()
            if item is not None and item.covers(scene_pos):
                return item.body_id
        return None

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        body_id = self._body_at(pos)
        self.controller.pointer_pressed(body_id, Point(pos.x(), pos.y()))
        self.setCursor(Qt.CursorShape.ClosedHandCursor if body_id is not None else Qt.CursorShape.SizeAllCursor)
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        pos = event.position()
        point = Point(pos.x(), pos.y())
        if event.buttons() & Qt.MouseButton.LeftButton:
            self.controller.pointer_moved(point)
            event.accept()
            return

        body_id = self._body_at(pos)
        if body_id != self._hovered:
            if self._hovered is not None:
                self.controller.hover_left()
            if body_id is not None:
                self.controller.hover_entered(body_id, point)
            self._hovered = body_id
        elif body_id is not None:
            self.controller.hover_moved(point)
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.controller.pointer_released()
            self.unsetCursor()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:
        pos = event.position()
        self.controller.wheel(event.angleDelta().y(), Point(pos.x(), pos.y()))
        event.accept()

    def leaveEvent(self, event) -> None:
        if self._hovered is not None:
            self._hovered = None
            self.controller.hover_left()
        super().leaveEvent(event)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        size = event.size()
        self._scene.setSceneRect(0, 0, size.width(), size.height())
        self._resize_timer.start()

    def _push_viewport_size(self) -> None:
        vp = self.viewport()
        self.controller.set_viewport_size(vp.width(), vp.height())
