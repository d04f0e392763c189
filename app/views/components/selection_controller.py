"""SelectionController: Handles tile selection operations and checkbox management."""

from __future__ import annotations

import re
from typing import Any, Protocol

from PySide6.QtWidgets import QMessageBox
from loguru import logger


class StatusReporter(Protocol):
    """Protocol for status reporting callback."""

    def show_status(self, message: str, timeout: int = 3000) -> None:
        """Show status message."""
        ...


class UIUpdateCallback(Protocol):
    """Protocol for UI update callbacks."""

    def refresh_gallery(self) -> None:
        """Re-render the active gallery tab from the view-model."""
        ...


class SelectionController:
    """Handles selection-related operations on behalf of the main window.

    All state changes go through the view-model; this class only turns UI
    gestures into view-model calls and reports the outcome.
    """

    def __init__(
        self,
        vm: Any,
        ui_updater: UIUpdateCallback,
        status_reporter: StatusReporter | None = None,
    ) -> None:
        """Initialize with the view model and callbacks.

        Args:
            vm: MainVM instance
            ui_updater: Callback re-rendering the gallery
            status_reporter: Optional callback for status messages
        """
        self.vm = vm
        self.ui_updater = ui_updater
        self.status_reporter = status_reporter

    def on_tile_checked(self, filename: str, checked: bool) -> None:
        """Sync a checkbox toggle into the view-model.

        Refused toggles (busy or vanished records) are reverted by the
        re-render that follows.
        """
        if (filename in self.vm.sync.selected) != checked:
            self.vm.toggle_select(filename)
        self.ui_updater.refresh_gallery()

    def select_all(self) -> int:
        count = self.vm.select_all()
        self.ui_updater.refresh_gallery()
        self._report(f"Selected {self.vm.selection_count} photo(s)")
        return count

    def clear_selection(self) -> None:
        self.vm.clear_selection()
        self.ui_updater.refresh_gallery()
        self._report("Selection cleared")

    def select_files(self, filenames: list[str]) -> int:
        """Add highlighted tiles to the selection."""
        count = self.vm.sync.select(filenames)
        logger.info("Marked {} photos as selected", count)
        self.ui_updater.refresh_gallery()
        self._report(f"Marked {count} photo(s) as selected")
        return count

    def unselect_files(self, filenames: list[str]) -> int:
        """Remove highlighted tiles from the selection."""
        count = self.vm.sync.unselect(filenames)
        logger.info("Unmarked {} photos", count)
        self.ui_updater.refresh_gallery()
        self._report(f"Unmarked {count} photo(s)")
        return count

    def apply_regex_selection(
        self, field: str, pattern: str, make_checked: bool, parent_widget: Any = None
    ) -> int:
        """Apply regex-based selection to the visible photos.

        Args:
            field: Field name to match against
            pattern: Regex pattern to apply
            make_checked: Whether to select (True) or unselect (False) matches
            parent_widget: Parent widget for error dialogs
        """
        try:
            changed = self.vm.apply_regex_selection(field, pattern, make_checked)
        except re.error:
            if parent_widget:
                QMessageBox.warning(parent_widget, "Regex", "Invalid regular expression.")
            return 0
        self.ui_updater.refresh_gallery()
        verb = "Selected" if make_checked else "Unselected"
        self._report(f"{verb} {changed} photo(s) by {field}")
        return changed

    def _report(self, message: str) -> None:
        if self.status_reporter:
            self.status_reporter.show_status(message)
