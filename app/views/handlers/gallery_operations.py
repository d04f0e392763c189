"""GalleryOperationsHandler: Runs analyze, discard and delete workflows."""

from __future__ import annotations

from typing import Any, Protocol

from PySide6.QtCore import QObject, QTimer
from PySide6.QtWidgets import QDialog, QMessageBox
from loguru import logger

from app.viewmodels.main_vm import AnalyzeRun
from app.views.constants import DEFAULT_SETTLE_DELAY_MS
from app.views.dialogs.confirm_dialog import ConfirmDialog
from core.models import RemovalKind
from core.services.interfaces import LEVEL_WARNING, Notice


class UIUpdateCallback(Protocol):
    """Protocol for UI update callbacks."""

    def refresh_gallery(self) -> None:
        """Re-render the active gallery tab from the view-model."""
        ...


class NoticePresenter(Protocol):
    """Protocol for toast presentation."""

    def show_notice(self, notice: Notice) -> None:
        """Show a transient notice."""
        ...


class GalleryOperationsHandler:
    """Handles gallery mutation workflows.

    This class encapsulates:
    - Sequential batch analysis with a settle delay between photos
    - Discard/delete with confirmation and optimistic removal
    - Rollback and toasts for failed batches
    """

    def __init__(
        self,
        vm: Any,
        runner: Any,
        feed: Any,
        parent_widget: QObject,
        ui_updater: UIUpdateCallback,
        presenter: NoticePresenter,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
    ) -> None:
        """Initialize with required services and callbacks.

        Args:
            vm: MainVM instance
            runner: GatewayTaskRunner for blocking calls
            feed: Live feed; refreshed after each mutation
            parent_widget: Parent widget for dialogs
            ui_updater: Callback for UI updates
            presenter: Toast presenter
            settle_delay_ms: Pause after each review before the next one starts
        """
        self.vm = vm
        self.runner = runner
        self.feed = feed
        self.parent = parent_widget
        self.ui_updater = ui_updater
        self.presenter = presenter
        self.settle_delay_ms = int(settle_delay_ms)
        self._analyzing = False

    @property
    def is_analyzing(self) -> bool:
        return self._analyzing

    # Analyze

    def analyze_selected(self) -> None:
        """Review the selected pending photos one after another."""
        if self._analyzing:
            self.presenter.show_notice(Notice("An analysis is already running", LEVEL_WARNING))
            return
        run = self.vm.begin_analyze()
        if run is None:
            QMessageBox.information(self.parent, "Analyze", "No pending photos selected.")
            return
        self._analyzing = True
        self.ui_updater.refresh_gallery()
        self._analyze_next(run)

    def _analyze_next(self, run: AnalyzeRun) -> None:
        remaining = run.remaining
        if not remaining:
            self._analyzing = False
            logger.info(
                "Analyze finished: {} ok, {} failed", len(run.analyzed), len(run.failed)
            )
            self.presenter.show_notice(self.vm.finish_analyze(run))
            self.ui_updater.refresh_gallery()
            return
        filename = remaining[0]
        self.runner.submit(
            lambda: self.vm.review_photo(filename),
            lambda _result, error: self._on_reviewed(run, filename, error),
            label="review",
        )

    def _on_reviewed(self, run: AnalyzeRun, filename: str, error: Any) -> None:
        notice = self.vm.complete_review(run, filename, error)
        if notice is not None:
            self.presenter.show_notice(notice)
        self.ui_updater.refresh_gallery()

        def _continue() -> None:
            self.feed.refresh()
            self._analyze_next(run)

        QTimer.singleShot(self.settle_delay_ms, _continue)

    # Discard / delete

    def discard_selected(self) -> None:
        self._remove_selected(RemovalKind.DISCARD)

    def delete_selected(self) -> None:
        self._remove_selected(RemovalKind.DELETE)

    def _remove_selected(self, kind: RemovalKind) -> None:
        candidates = self.vm.removal_candidates(kind)
        title = "Discard" if kind == RemovalKind.DISCARD else "Delete"
        if not candidates:
            QMessageBox.information(self.parent, title, "No photos selected.")
            return

        dlg = ConfirmDialog.for_removal(kind, candidates, self.parent)
        if dlg.exec() != QDialog.Accepted:
            return

        if kind == RemovalKind.DISCARD:
            filenames = self.vm.begin_discard()
        else:
            filenames = self.vm.begin_delete()
        if not filenames:
            return
        self.ui_updater.refresh_gallery()
        call = self.vm.discard if kind == RemovalKind.DISCARD else self.vm.delete
        self.runner.submit(
            lambda: call(filenames),
            lambda result, error: self._on_removed(kind, filenames, result, error),
            label=kind.value,
        )

    def _on_removed(self, kind: RemovalKind, filenames: list[str], result: Any, error: Any) -> None:
        notice = self.vm.complete_removal(kind, filenames, result, error)
        self.presenter.show_notice(notice)
        self.ui_updater.refresh_gallery()
        if error is None:
            self.feed.refresh()
