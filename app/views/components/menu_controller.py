"""MenuController: Manages menu creation and action connections."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMainWindow, QMenuBar


class MenuController:
    """Manages main window menu creation and action connections.

    This class encapsulates all menu-related functionality including:
    - Menu structure creation
    - Action creation and organization
    - Action-to-handler connection management
    """

    def __init__(self, main_window: QMainWindow) -> None:
        """Initialize with main window reference.

        Args:
            main_window: The QMainWindow to create menus for
        """
        self.window = main_window
        self.actions: dict[str, QAction] = {}

    def setup_menus(self) -> dict[str, QAction]:
        """Create all menus and return action references.

        Returns:
            Dictionary mapping action names to QAction instances
        """
        menubar = QMenuBar(self.window)

        # File Menu
        file_menu = menubar.addMenu("File")
        self.actions["upload"] = file_menu.addAction("Upload Photos…")
        self.actions["refresh"] = file_menu.addAction("Refresh")
        self.actions["refresh"].setShortcut(QKeySequence.Refresh)
        file_menu.addSeparator()
        self.actions["exit"] = file_menu.addAction("Exit")

        # Photos Menu
        photos_menu = menubar.addMenu("Photos")
        self.actions["analyze"] = photos_menu.addAction("Analyze Selected")
        self.actions["discard"] = photos_menu.addAction("Discard Selected…")
        self.actions["delete"] = photos_menu.addAction("Delete Selected…")

        # Select Menu
        select_menu = menubar.addMenu("Select")
        self.actions["select_all"] = select_menu.addAction("Select All Visible")
        self.actions["select_all"].setShortcut(QKeySequence.SelectAll)
        self.actions["clear_selection"] = select_menu.addAction("Clear Selection")
        select_menu.addSeparator()
        self.actions["select_by"] = select_menu.addAction("Select by Field/Regex…")

        # Log Menu
        log_menu = menubar.addMenu("Log")
        self.actions["open_latest_log"] = log_menu.addAction("Open Latest Log")
        self.actions["open_latest_audit_log"] = log_menu.addAction("Open Latest Audit Log")
        log_menu.addSeparator()
        self.actions["open_log_directory"] = log_menu.addAction("Open Log Directory")
        self.actions["open_audit_log_directory"] = log_menu.addAction("Open Audit Log Directory")

        self.window.setMenuBar(menubar)
        return self.actions

    def connect_actions(self, handlers: dict[str, Callable]) -> None:
        """Connect menu actions to their handler methods.

        Args:
            handlers: Dictionary mapping action names to handler callables
        """
        for name, action in self.actions.items():
            handler = handlers.get(name)
            if handler is not None:
                action.triggered.connect(handler)
        if "exit" not in handlers:
            self.actions["exit"].triggered.connect(self.window.close)

    def get_action(self, name: str) -> QAction | None:
        """Get a specific action by name."""
        return self.actions.get(name)

    def enable_action(self, name: str, enabled: bool = True) -> None:
        """Enable or disable a specific action.

        Args:
            name: Action name
            enabled: Whether to enable the action
        """
        action = self.actions.get(name)
        if action:
            action.setEnabled(enabled)
