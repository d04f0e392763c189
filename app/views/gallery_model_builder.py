from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QIcon, QPixmap, QStandardItem, QStandardItemModel

from app.viewmodels.photo_vm import PhotoVM
from app.views.constants import (
    BAND_COLORS,
    CATEGORY_ICONS,
    FILENAME_ROLE,
    STATE_ROLE,
    THUMB_URL_ROLE,
)
from core.services.gallery_sync import PhotoView


def placeholder_icon(side: int) -> QIcon:
    """Flat grey tile shown until the thumbnail arrives."""
    pix = QPixmap(max(1, side), max(1, side))
    pix.fill(QColor(220, 220, 220))
    return QIcon(pix)


def item_text(vm: PhotoVM) -> str:
    """Caption under a gallery tile."""
    lines = [vm.filename]
    details = []
    if vm.score_text:
        details.append(f"★ {vm.score_text}")
    category = vm.view.record.category
    if category:
        details.append(f"{CATEGORY_ICONS.get(category, '')} {vm.category_label}".strip())
    if details:
        lines.append("  ".join(details))
    if vm.state_label:
        lines.append(vm.state_label)
    return "\n".join(lines)


def build_item(view: PhotoView, icon: QIcon) -> QStandardItem:
    """One checkable tile; busy tiles are shown but cannot be checked."""
    vm = PhotoVM(view)
    item = QStandardItem(icon, item_text(vm))
    item.setEditable(False)
    item.setData(vm.filename, FILENAME_ROLE)
    item.setData(view.record.thumbnail_url, THUMB_URL_ROLE)
    item.setData(vm.state_label, STATE_ROLE)
    item.setToolTip(vm.tooltip)
    item.setCheckable(vm.is_checkable)
    if vm.is_checkable:
        item.setCheckState(Qt.Checked if view.is_selected else Qt.Unchecked)
    else:
        item.setForeground(QColor(140, 140, 140))
    band = vm.score_band
    if band is not None:
        item.setBackground(QColor(BAND_COLORS[band]).lighter(185))
    return item


def build_model(
    views: Iterable[PhotoView], icons: dict[str, QIcon], side: int
) -> QStandardItemModel:
    """Build the gallery model in the given order.

    Args:
        views: Annotated records of the active tab (already filtered/sorted).
        icons: Thumbnails already loaded, keyed by filename.
        side: Tile size used for the placeholder icon.
    """
    model = QStandardItemModel()
    placeholder = placeholder_icon(side)
    for view in views:
        model.appendRow(build_item(view, icons.get(view.filename, placeholder)))
    return model
