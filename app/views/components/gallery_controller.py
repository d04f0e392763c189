"""GalleryController: Manages the thumbnail grid and its model."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QModelIndex, QSize, Qt
from PySide6.QtGui import QIcon, QPixmap, QStandardItem
from PySide6.QtWidgets import QAbstractItemView, QListView
from loguru import logger

from app.views.constants import FILENAME_ROLE, GRID_SPACING_PX
from app.views.gallery_model_builder import build_model
from core.services.gallery_sync import PhotoView


class GalleryController:
    """Manages gallery view operations, model rebuilding and thumbnails.

    This class encapsulates all grid-related functionality including:
    - Model building from annotated records
    - Thumbnail requests and icon caching
    - Item/filename extraction for menus and dialogs
    - Forwarding checkbox toggles
    """

    def __init__(
        self,
        view: QListView,
        thumb_size: int,
        thumbnail_requester: Callable[[str, str, int], Any] | None = None,
    ) -> None:
        """Initialize with a QListView instance.

        Args:
            view: The QListView widget to manage
            thumb_size: Tile icon side in pixels
            thumbnail_requester: Callable `(filename, url, side)` starting a load
        """
        self.view = view
        self._thumb_size = int(thumb_size)
        self._request_thumbnail = thumbnail_requester
        self._model = None
        self._icons: dict[str, QIcon] = {}
        self._requested: set[str] = set()
        self._check_handler: Callable[[str, bool], None] | None = None

    def setup_view_properties(self) -> None:
        """Configure the list view as a wrapping icon grid."""
        self.view.setViewMode(QListView.IconMode)
        self.view.setResizeMode(QListView.Adjust)
        self.view.setMovement(QListView.Static)
        self.view.setIconSize(QSize(self._thumb_size, self._thumb_size))
        self.view.setGridSize(QSize(self._thumb_size + 24, self._thumb_size + 64))
        self.view.setSpacing(GRID_SPACING_PX)
        self.view.setWordWrap(True)
        self.view.setUniformItemSizes(True)
        self.view.setSelectionMode(QAbstractItemView.ExtendedSelection)

    def set_check_handler(self, handler: Callable[[str, bool], None]) -> None:
        """Register the callback for user checkbox toggles `(filename, checked)`."""
        self._check_handler = handler

    def refresh_model(self, views: list[PhotoView]) -> None:
        """Rebuild the model from `views`, keeping scroll position and loaded icons."""
        scroll = self.view.verticalScrollBar().value()
        model = build_model(views, self._icons, self._thumb_size)
        model.setParent(self.view)
        model.itemChanged.connect(self._on_item_changed)
        old = self._model
        self.view.setModel(model)
        self._model = model
        if old is not None:
            old.deleteLater()
        self.view.verticalScrollBar().setValue(scroll)

        if self._request_thumbnail is not None:
            for v in views:
                name = v.filename
                if name in self._icons or name in self._requested:
                    continue
                url = v.record.thumbnail_url
                if not url:
                    continue
                self._requested.add(name)
                self._request_thumbnail(name, url, self._thumb_size)

    def on_thumbnail_loaded(self, filename: str, image: Any) -> None:
        """Install a downloaded thumbnail on the matching tile."""
        self._requested.discard(filename)
        if image is None or image.isNull():
            return
        icon = QIcon(QPixmap.fromImage(image))
        self._icons[filename] = icon
        item = self.item_for_filename(filename)
        if item is not None:
            item.setIcon(icon)

    def item_for_filename(self, filename: str) -> QStandardItem | None:
        if self._model is None:
            return None
        for row in range(self._model.rowCount()):
            item = self._model.item(row)
            if item is not None and item.data(FILENAME_ROLE) == filename:
                return item
        return None

    def filename_from_index(self, index: QModelIndex) -> str | None:
        if not index.isValid():
            return None
        value = index.data(FILENAME_ROLE)
        return str(value) if value else None

    def get_selected_filenames(self) -> list[str]:
        """Filenames of highlighted tiles (not the checkbox selection)."""
        selection_model = self.view.selectionModel()
        if selection_model is None:
            return []
        names = [self.filename_from_index(i) for i in selection_model.selectedIndexes()]
        return [n for n in names if n]

    def _on_item_changed(self, item: QStandardItem) -> None:
        if self._check_handler is None or not item.isCheckable():
            return
        filename = item.data(FILENAME_ROLE)
        if not filename:
            return
        checked = item.checkState() == Qt.Checked
        logger.debug("Tile check toggled: {} -> {}", filename, checked)
        self._check_handler(str(filename), checked)

    @property
    def model(self):
        """Get the current gallery model."""
        return self._model
