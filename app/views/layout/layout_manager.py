"""LayoutManager: Builds the main window sections."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QTabBar,
    QVBoxLayout,
    QWidget,
)

from app.views.constants import CATEGORY_FILTERS, SORT_LABELS, TABS


class LayoutManager:
    """Manages main window layout.

    This class encapsulates:
    - Header with gallery counters
    - Tab bar switching between gallery tabs and report pages
    - Filter bar (search, category, sort) for the reviewed tab
    - Action bar for batch operations
    """

    WINDOW_SIZE_RATIO = 0.7
    PAGE_GALLERY = 0
    PAGE_ANALYTICS = 1
    PAGE_COACHING = 2
    GALLERY_LOADING = 0
    GALLERY_EMPTY = 1
    GALLERY_LIST = 2

    def __init__(self, main_window: QMainWindow) -> None:
        """Initialize with main window reference.

        Args:
            main_window: The QMainWindow to manage layout for
        """
        self.window = main_window
        self.stats_label = QLabel("")
        self.tab_bar = QTabBar()
        self.pages = QStackedWidget()
        self.gallery_stack = QStackedWidget()
        self.loading_label = QLabel("Loading gallery…")
        self.empty_label = QLabel("No photos here yet.")
        self.search_edit = QLineEdit()
        self.category_combo = QComboBox()
        self.sort_combo = QComboBox()
        self.filter_bar = QWidget()
        self.btn_analyze = QPushButton("Analyze")
        self.btn_discard = QPushButton("Discard")
        self.btn_delete = QPushButton("Delete")
        self.btn_select_all = QPushButton("Select All")
        self.btn_clear = QPushButton("Clear")
        self.selection_label = QLabel("")

    def setup_main_layout(
        self, gallery: QListView, analytics: QWidget, coaching: QWidget
    ) -> QWidget:
        """Create the central widget.

        Args:
            gallery: Thumbnail grid
            analytics: Analytics page
            coaching: Coaching page

        Returns:
            Central widget configured with the layout
        """
        central = QWidget(self.window)
        root = QVBoxLayout(central)

        self.stats_label.setStyleSheet("font-weight: bold;")
        root.addWidget(self.stats_label)

        for _key, title in TABS:
            self.tab_bar.addTab(title)
        root.addWidget(self.tab_bar)

        self.pages.addWidget(self._create_gallery_page(gallery))
        self.pages.addWidget(analytics)
        self.pages.addWidget(coaching)
        root.addWidget(self.pages, 1)
        return central

    def _create_gallery_page(self, gallery: QListView) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        filters = QHBoxLayout(self.filter_bar)
        filters.setContentsMargins(0, 0, 0, 0)
        self.search_edit.setPlaceholderText("Search file, tags, category, summary…")
        self.search_edit.setClearButtonEnabled(True)
        for key, label in CATEGORY_FILTERS:
            self.category_combo.addItem(label, key)
        for key, label in SORT_LABELS:
            self.sort_combo.addItem(label, key)
        filters.addWidget(self.search_edit, 1)
        filters.addWidget(self.category_combo)
        filters.addWidget(self.sort_combo)
        layout.addWidget(self.filter_bar)

        actions = QHBoxLayout()
        for b in (self.btn_analyze, self.btn_discard, self.btn_delete):
            actions.addWidget(b)
        actions.addStretch(1)
        actions.addWidget(self.selection_label)
        actions.addWidget(self.btn_select_all)
        actions.addWidget(self.btn_clear)
        layout.addLayout(actions)

        for label in (self.loading_label, self.empty_label):
            label.setAlignment(Qt.AlignCenter)
        self.gallery_stack.addWidget(self.loading_label)
        self.gallery_stack.addWidget(self.empty_label)
        self.gallery_stack.addWidget(gallery)
        layout.addWidget(self.gallery_stack, 1)
        return page

    def show_gallery_state(self, loading: bool, empty: bool) -> None:
        if loading:
            self.gallery_stack.setCurrentIndex(self.GALLERY_LOADING)
        elif empty:
            self.gallery_stack.setCurrentIndex(self.GALLERY_EMPTY)
        else:
            self.gallery_stack.setCurrentIndex(self.GALLERY_LIST)

    def setup_initial_window_size(self) -> None:
        """Setup initial window size based on screen dimensions."""
        screen = QApplication.primaryScreen()
        if screen is not None:
            rect = screen.availableGeometry()
            self.window.resize(
                int(rect.width() * self.WINDOW_SIZE_RATIO),
                int(rect.height() * self.WINDOW_SIZE_RATIO),
            )
