"""ContextMenuHandler: Manages gallery context menu creation and actions."""

from __future__ import annotations

from typing import Any, Protocol

from PySide6.QtCore import QPoint, Qt, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QListView, QMenu

from core.models import STATUS_PENDING


class ActionHandlers(Protocol):
    """Protocol for action handler callbacks."""

    def open_lightbox(self, filename: str) -> None: ...

    def select_files(self, filenames: list[str]) -> None: ...

    def unselect_files(self, filenames: list[str]) -> None: ...

    def analyze_selected(self) -> None: ...

    def discard_selected(self) -> None: ...

    def delete_selected(self) -> None: ...

    def show_select_dialog(self) -> None: ...

    def search_tag(self, tag: str) -> None: ...


class GalleryItemProvider(Protocol):
    """Protocol for gallery item provider."""

    def get_selected_filenames(self) -> list[str]:
        """Get currently highlighted filenames."""
        ...


class ContextMenuHandler:
    """Manages context menu creation and actions.

    Highlighted tiles are the menu's subject; batch actions act on the
    checkbox selection.
    """

    def __init__(
        self,
        view: QListView,
        item_provider: GalleryItemProvider,
        action_handlers: ActionHandlers,
        vm: Any,
        parent_widget: Any,
    ) -> None:
        """Initialize with the gallery view and action handlers.

        Args:
            view: The QListView to manage context menus for
            item_provider: Provider for highlighted filenames
            action_handlers: Handler for context menu actions
            vm: MainVM, for the active tab and record URLs
            parent_widget: Parent widget for menu creation
        """
        self.view = view
        self.item_provider = item_provider
        self.handlers = action_handlers
        self.vm = vm
        self.parent = parent_widget

    def setup_context_menu(self) -> None:
        """Setup context menu policy and connect signals."""
        self.view.setContextMenuPolicy(Qt.CustomContextMenu)
        self.view.customContextMenuRequested.connect(self._on_context_menu)

    def _on_context_menu(self, point: QPoint) -> None:
        index = self.view.indexAt(point)
        if not index.isValid():
            return
        filenames = self.item_provider.get_selected_filenames()
        if not filenames:
            return
        menu = QMenu(self.parent)
        self.populate_menu(menu, filenames)
        menu.exec(self.view.viewport().mapToGlobal(point))

    def populate_menu(self, menu: QMenu, filenames: list[str]) -> None:
        """Fill `menu` for the highlighted `filenames`."""
        if len(filenames) == 1:
            name = filenames[0]
            open_action = menu.addAction("Open")
            open_action.triggered.connect(lambda: self.handlers.open_lightbox(name))
            record = self.vm.sync.find(name)
            if record is not None and record.original_url:
                jpg_action = menu.addAction("Download JPG")
                jpg_action.triggered.connect(
                    lambda: QDesktopServices.openUrl(QUrl(record.original_url))
                )
            if record is not None and record.raw_download_url:
                raw_action = menu.addAction("Download RAW")
                raw_action.triggered.connect(
                    lambda: QDesktopServices.openUrl(QUrl(record.raw_download_url))
                )
            if record is not None and record.tag_list:
                tags_menu = menu.addMenu("Search Tag")
                for tag in record.tag_list:
                    tag_action = tags_menu.addAction(f"#{tag}")
                    tag_action.triggered.connect(
                        lambda _=False, t=tag: self.handlers.search_tag(t)
                    )
            menu.addSeparator()

        select_action = menu.addAction("Select")
        select_action.triggered.connect(lambda: self.handlers.select_files(filenames))
        unselect_action = menu.addAction("Unselect")
        unselect_action.triggered.connect(lambda: self.handlers.unselect_files(filenames))
        by_field = menu.addAction("Select by Field/Regex…")
        by_field.triggered.connect(self.handlers.show_select_dialog)
        menu.addSeparator()

        if self.vm.tab == STATUS_PENDING:
            analyze = menu.addAction("Analyze Selected")
            analyze.triggered.connect(self.handlers.analyze_selected)
            discard = menu.addAction("Discard Selected…")
            discard.triggered.connect(self.handlers.discard_selected)
        else:
            delete = menu.addAction("Delete Selected…")
            delete.triggered.connect(self.handlers.delete_selected)
