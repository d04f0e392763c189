"""MainWindow wiring the gallery feed, view-model and view components."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QModelIndex, QTimer, Signal
from PySide6.QtWidgets import QListView, QMainWindow, QMessageBox
from loguru import logger

from app.views.components.gallery_controller import GalleryController
from app.views.components.menu_controller import MenuController
from app.views.components.selection_controller import SelectionController
from app.views.constants import (
    DEFAULT_SETTLE_DELAY_MS,
    DEFAULT_THUMB_SIZE,
    DEFAULT_TOAST_TIMEOUT_MS,
    STALE_SWEEP_INTERVAL_MS,
    TAB_ANALYTICS,
    TAB_COACHING,
    TABS,
)
from app.views.gateway_tasks import GatewayTaskRunner
from app.views.handlers.context_menu import ContextMenuHandler
from app.views.handlers.dialog_handler import DialogHandler
from app.views.handlers.gallery_operations import GalleryOperationsHandler
from app.views.image_tasks import ImageTaskRunner
from app.views.layout.layout_manager import LayoutManager
from app.views.widgets.analytics_view import AnalyticsView
from app.views.widgets.coaching_view import CoachingView
from core.models import STATUS_PENDING, STATUS_REVIEWED
from core.services.interfaces import LEVEL_WARNING, Notice, UploadSummary
from infrastructure.logging import (
    open_audit_log_directory,
    open_latest_audit_log,
    open_latest_log,
    open_log_directory,
)

_TOAST_STYLES = {
    "info": "",
    "warning": "color: #8a6d00;",
    "error": "color: #b00020; font-weight: bold;",
}


class MainWindow(QMainWindow):
    """Main application window.

    Owns the controllers and handlers; every state change goes through the
    view-model and is followed by `refresh_gallery`.
    """

    # Signal for ImageTaskRunner
    imageLoaded = Signal(str, str, object)  # token, filename, QImage

    def __init__(
        self,
        vm: Any,
        feed: Any,
        image_service: Any | None = None,
        upload_service: Any | None = None,
        settings: Any | None = None,
    ) -> None:
        """Initialize MainWindow with all services and components.

        Args:
            vm: MainVM instance
            feed: PollingGalleryFeed delivering snapshots
            image_service: ThumbnailService for grid and lightbox images
            upload_service: UploadService for the upload dialog
            settings: JsonSettings for UI tuning
        """
        super().__init__()
        self._vm = vm
        self._feed = feed
        self._img = image_service
        self._uploader = upload_service
        self._settings = settings
        self._thumb_size = self._setting_int("ui.thumbnail_size", DEFAULT_THUMB_SIZE)
        self._toast_ms = self._setting_int("ui.toast_timeout_ms", DEFAULT_TOAST_TIMEOUT_MS)
        self._analytics_loaded = False

        self._setup_components()
        self._setup_ui()
        self._connect_signals()
        self.statusBar().showMessage("Ready", 3000)

    def _setting_int(self, key: str, default: int) -> int:
        if self._settings is None:
            return default
        return self._settings.get_int(key, default)

    def _setup_components(self) -> None:
        """Setup all controllers and handlers."""
        self.gallery = QListView()
        self.runner = GatewayTaskRunner(self)
        self.image_runner = ImageTaskRunner(service=self._img, receiver=self)

        self.gallery_controller = GalleryController(
            self.gallery, self._thumb_size, self.image_runner.request_grid_thumbnail
        )
        self.menu_controller = MenuController(self)
        self.layout_manager = LayoutManager(self)
        self.analytics_view = AnalyticsView()
        self.coaching_view = CoachingView()

        self.status_reporter = StatusReporterImpl(self)
        self.selection_controller = SelectionController(self._vm, self, self.status_reporter)
        self.gallery_operations = GalleryOperationsHandler(
            vm=self._vm,
            runner=self.runner,
            feed=self._feed,
            parent_widget=self,
            ui_updater=self,
            presenter=self,
            settle_delay_ms=self._setting_int("ui.settle_delay_ms", DEFAULT_SETTLE_DELAY_MS),
        )
        self.dialog_handler = DialogHandler(
            parent_widget=self,
            vm=self._vm,
            runner=self.runner,
            image_runner=self.image_runner,
            upload_service=self._uploader,
            highlighted_provider=self.gallery_controller.get_selected_filenames,
            regex_handler=self._apply_select_regex,
            upload_finished=self._on_upload_finished,
        )
        self.action_handlers = ActionHandlersImpl(
            gallery_operations=self.gallery_operations,
            selection_controller=self.selection_controller,
            dialog_handler=self.dialog_handler,
            tag_search=self.search_tag,
        )
        self.context_menu_handler = ContextMenuHandler(
            view=self.gallery,
            item_provider=self.gallery_controller,
            action_handlers=self.action_handlers,
            vm=self._vm,
            parent_widget=self,
        )

    def _setup_ui(self) -> None:
        self.setWindowTitle("Photo Curator")
        self.gallery_controller.setup_view_properties()
        central = self.layout_manager.setup_main_layout(
            self.gallery, self.analytics_view, self.coaching_view
        )
        self.setCentralWidget(central)
        self.layout_manager.setup_initial_window_size()
        self.menu_controller.setup_menus()
        self.context_menu_handler.setup_context_menu()

        idx = self.layout_manager.sort_combo.findData(self._vm.sort_key)
        if idx >= 0:
            self.layout_manager.sort_combo.setCurrentIndex(idx)

        self._sweep_timer = QTimer(self)
        self._sweep_timer.setInterval(STALE_SWEEP_INTERVAL_MS)

    def _connect_signals(self) -> None:
        handlers = {
            "upload": self.dialog_handler.show_upload_dialog,
            "refresh": self._feed.refresh,
            "exit": self.close,
            "analyze": self.gallery_operations.analyze_selected,
            "discard": self.gallery_operations.discard_selected,
            "delete": self.gallery_operations.delete_selected,
            "select_all": self.selection_controller.select_all,
            "clear_selection": self.selection_controller.clear_selection,
            "select_by": self.dialog_handler.show_select_dialog,
            "open_latest_log": lambda: self._open_log(open_latest_log, "No log file found."),
            "open_latest_audit_log": lambda: self._open_log(
                open_latest_audit_log, "No audit log found."
            ),
            "open_log_directory": lambda: self._open_log(open_log_directory, ""),
            "open_audit_log_directory": lambda: self._open_log(open_audit_log_directory, ""),
        }
        self.menu_controller.connect_actions(handlers)

        lm = self.layout_manager
        lm.tab_bar.currentChanged.connect(self._on_tab_changed)
        lm.search_edit.textChanged.connect(self._on_search_changed)
        lm.category_combo.currentIndexChanged.connect(self._on_category_changed)
        lm.sort_combo.currentIndexChanged.connect(self._on_sort_changed)
        lm.btn_analyze.clicked.connect(self.gallery_operations.analyze_selected)
        lm.btn_discard.clicked.connect(self.gallery_operations.discard_selected)
        lm.btn_delete.clicked.connect(self.gallery_operations.delete_selected)
        lm.btn_select_all.clicked.connect(self.selection_controller.select_all)
        lm.btn_clear.clicked.connect(self.selection_controller.clear_selection)

        self.gallery_controller.set_check_handler(self.selection_controller.on_tile_checked)
        self.gallery.doubleClicked.connect(self._on_tile_activated)
        self.imageLoaded.connect(self._on_image_loaded)

        self._feed.snapshotReceived.connect(self._on_snapshot)
        self._feed.slowConnection.connect(self._on_slow_connection)
        self._feed.feedError.connect(self._on_feed_error)

        self.analytics_view.refreshRequested.connect(self._load_analytics)
        self.coaching_view.generateRequested.connect(self._load_coaching)
        self._sweep_timer.timeout.connect(self._sweep_stale_removing)

    # Lifecycle

    def start(self) -> None:
        """Paint from cache, then subscribe to the live feed."""
        self._vm.load_cached_snapshot()
        cached = self._vm.cached_coaching()
        if cached is not None:
            self.coaching_view.show_report(cached, cached=True)
        self.refresh_gallery()
        self._feed.start()
        self._sweep_timer.start()

    def closeEvent(self, event) -> None:
        """Unsubscribe from the feed before closing."""
        self._sweep_timer.stop()
        self._feed.stop()
        logger.info("Main window closed")
        event.accept()

    # Rendering

    def refresh_gallery(self) -> None:
        """Re-render header, action bar and the active gallery tab."""
        vm = self._vm
        stats = vm.stats()
        self.layout_manager.stats_label.setText(
            f"Pending: {stats.pending_count}   ·   Reviewed: {stats.reviewed_count}"
            f"   ·   Average: {stats.average_text}   ·   Best of: {stats.best_of_count}"
        )
        views = vm.visible_items()
        self.gallery_controller.refresh_model(views)
        self.layout_manager.show_gallery_state(vm.is_loading, not views)

        lm = self.layout_manager
        pending = vm.tab == STATUS_PENDING
        lm.filter_bar.setVisible(not pending)
        lm.btn_analyze.setVisible(pending)
        lm.btn_discard.setVisible(pending)
        lm.btn_delete.setVisible(not pending)
        has_selection = vm.selection_count > 0
        lm.btn_analyze.setEnabled(has_selection and not self.gallery_operations.is_analyzing)
        lm.btn_discard.setEnabled(has_selection)
        lm.btn_delete.setEnabled(has_selection)
        lm.selection_label.setText(f"{vm.selection_count} selected" if has_selection else "")
        self.menu_controller.enable_action("analyze", pending)
        self.menu_controller.enable_action("discard", pending)
        self.menu_controller.enable_action("delete", not pending)

    def show_notice(self, notice: Notice | None) -> None:
        """Show `notice` as a status-bar toast."""
        if notice is None:
            return
        bar = self.statusBar()
        bar.setStyleSheet(_TOAST_STYLES.get(notice.level, ""))
        bar.showMessage(notice.message, self._toast_ms)

    # Feed slots

    def _on_snapshot(self, status: str, records: Any) -> None:
        self._vm.on_feed_snapshot(status, records)
        if status == STATUS_REVIEWED:
            self._analytics_loaded = False
        self.refresh_gallery()

    def _on_slow_connection(self) -> None:
        self.show_notice(self._vm.on_feed_timeout())
        self.refresh_gallery()

    def _on_feed_error(self, status: str, message: str) -> None:
        self.show_notice(Notice(f"Could not refresh {status} photos: {message}", LEVEL_WARNING))

    def _sweep_stale_removing(self) -> None:
        if self._vm.expire_stale_removing():
            self.refresh_gallery()

    # UI slots

    def _on_tab_changed(self, index: int) -> None:
        if not 0 <= index < len(TABS):
            return
        key = TABS[index][0]
        if key == TAB_ANALYTICS:
            self.layout_manager.pages.setCurrentIndex(LayoutManager.PAGE_ANALYTICS)
            if not self._analytics_loaded:
                self._load_analytics()
            return
        if key == TAB_COACHING:
            self.layout_manager.pages.setCurrentIndex(LayoutManager.PAGE_COACHING)
            return
        self.layout_manager.pages.setCurrentIndex(LayoutManager.PAGE_GALLERY)
        self._vm.set_tab(key)
        self.refresh_gallery()

    def search_tag(self, tag: str) -> None:
        """Jump to the reviewed tab filtered by `tag`."""
        self._vm.search_tag(tag)
        lm = self.layout_manager
        lm.tab_bar.setCurrentIndex([key for key, _ in TABS].index(STATUS_REVIEWED))
        lm.search_edit.setText(self._vm.search)

    def _on_search_changed(self, text: str) -> None:
        self._vm.set_search(text)
        self.refresh_gallery()

    def _on_category_changed(self, _index: int) -> None:
        self._vm.set_category(self.layout_manager.category_combo.currentData())
        self.refresh_gallery()

    def _on_sort_changed(self, _index: int) -> None:
        self._vm.set_sort(self.layout_manager.sort_combo.currentData())
        self.refresh_gallery()

    def _on_tile_activated(self, index: QModelIndex) -> None:
        filename = self.gallery_controller.filename_from_index(index)
        if filename:
            self.dialog_handler.show_lightbox(filename)

    def _on_image_loaded(self, token: str, filename: str, image: Any) -> None:
        if token.startswith("full|"):
            self.dialog_handler.on_full_image_loaded(filename, image)
        else:
            self.gallery_controller.on_thumbnail_loaded(filename, image)

    def _on_upload_finished(self, summary: UploadSummary) -> None:
        self.show_notice(summary.to_notice())
        if summary.ok_count:
            self._feed.refresh()

    def _apply_select_regex(self, field: str, pattern: str, make_checked: bool) -> None:
        self.selection_controller.apply_regex_selection(field, pattern, make_checked, self)

    def _open_log(self, opener: Any, missing_message: str) -> None:
        if not opener() and missing_message:
            QMessageBox.information(self, "Log", missing_message)

    # Reports

    def _load_analytics(self) -> None:
        self.analytics_view.set_loading(True)
        self.runner.submit(self._vm.load_analytics, self._on_analytics, label="analytics")

    def _on_analytics(self, report: Any, error: Any) -> None:
        if error is not None:
            self.analytics_view.show_error(str(error))
            return
        self._analytics_loaded = True
        self.analytics_view.show_report(report)

    def _load_coaching(self) -> None:
        self.coaching_view.set_loading(True)
        self.runner.submit(self._vm.load_coaching, self._on_coaching, label="coaching")

    def _on_coaching(self, report: Any, error: Any) -> None:
        if error is not None:
            self.coaching_view.show_error(str(error))
            return
        self.coaching_view.show_report(report)


# Helper implementation classes


class StatusReporterImpl:
    """Implementation of StatusReporter protocol."""

    def __init__(self, main_window: QMainWindow):
        self.window = main_window

    def show_status(self, message: str, timeout: int = 3000) -> None:
        """Show status message in status bar."""
        self.window.statusBar().setStyleSheet("")
        self.window.statusBar().showMessage(message, timeout)


class ActionHandlersImpl:
    """Implementation of ActionHandlers protocol for the context menu."""

    def __init__(
        self,
        gallery_operations: GalleryOperationsHandler,
        selection_controller: SelectionController,
        dialog_handler: DialogHandler,
        tag_search: Callable[[str], None],
    ):
        self.ops = gallery_operations
        self.selection = selection_controller
        self.dialog = dialog_handler
        self._tag_search = tag_search

    def open_lightbox(self, filename: str) -> None:
        self.dialog.show_lightbox(filename)

    def select_files(self, filenames: list[str]) -> None:
        self.selection.select_files(filenames)

    def unselect_files(self, filenames: list[str]) -> None:
        self.selection.unselect_files(filenames)

    def analyze_selected(self) -> None:
        self.ops.analyze_selected()

    def discard_selected(self) -> None:
        self.ops.discard_selected()

    def delete_selected(self) -> None:
        self.ops.delete_selected()

    def show_select_dialog(self) -> None:
        self.dialog.show_select_dialog()

    def search_tag(self, tag: str) -> None:
        self._tag_search(tag)
