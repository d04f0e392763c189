"""DialogHandler: Coordinates dialog operations and user interactions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject
from loguru import logger

from app.views.constants import LIGHTBOX_MAX_SIDE
from app.views.dialogs.lightbox_dialog import LightboxDialog
from app.views.dialogs.select_dialog import SelectDialog
from app.views.dialogs.upload_dialog import UploadDialog
from core.services.interfaces import UploadSummary
from core.services.selection_service import SELECT_FIELDS, field_text


class DialogHandler:
    """Coordinates dialog operations and user interactions.

    This class encapsulates:
    - Select by field/regex dialog, pre-filled from the highlighted photo
    - Lightbox with asynchronous image and detail loading
    - Upload dialog
    """

    def __init__(
        self,
        parent_widget: QObject,
        vm: Any,
        runner: Any,
        image_runner: Any,
        upload_service: Any,
        highlighted_provider: Callable[[], list[str]],
        regex_handler: Callable[[str, str, bool], None],
        upload_finished: Callable[[UploadSummary], None],
    ) -> None:
        """Initialize with parent widget and collaborators.

        Args:
            parent_widget: Parent widget for dialogs
            vm: MainVM instance
            runner: GatewayTaskRunner for blocking calls
            image_runner: ImageTaskRunner for the lightbox image
            upload_service: UploadService for the upload dialog
            highlighted_provider: Returns highlighted filenames
            regex_handler: Handler for regex selection operations
            upload_finished: Called with the summary of an upload run
        """
        self.parent = parent_widget
        self.vm = vm
        self.runner = runner
        self.image_runner = image_runner
        self.upload_service = upload_service
        self.highlighted_provider = highlighted_provider
        self.regex_handler = regex_handler
        self.upload_finished = upload_finished
        self.lightbox: LightboxDialog | None = None

    def show_select_dialog(self) -> None:
        """Show the select by field/regex dialog with highlighted photo values."""
        dlg = SelectDialog(
            fields=SELECT_FIELDS, parent=self.parent, row_values=self._get_highlighted_values()
        )
        dlg.selectRequested.connect(lambda field, pattern: self.regex_handler(field, pattern, True))
        dlg.unselectRequested.connect(
            lambda field, pattern: self.regex_handler(field, pattern, False)
        )
        dlg.exec()

    def show_lightbox(self, filename: str) -> None:
        view = next((v for v in self.vm.visible_items() if v.filename == filename), None)
        if view is None:
            logger.debug("Lightbox target vanished: {}", filename)
            return
        dlg = LightboxDialog(view, self.parent)
        self.lightbox = dlg
        self.image_runner.request_full_image(
            filename, view.record.high_res_url, LIGHTBOX_MAX_SIDE
        )
        if view.record.review_id or view.record.score is not None:
            self.runner.submit(
                lambda: self.vm.fetch_detail(filename),
                lambda detail, _error: self._on_detail(filename, detail),
                label="detail",
            )
        dlg.exec()
        self.lightbox = None

    def on_full_image_loaded(self, filename: str, image: Any) -> None:
        if self.lightbox is not None and self.lightbox.filename == filename:
            self.lightbox.set_image(image)

    def _on_detail(self, filename: str, detail: Any) -> None:
        if self.lightbox is not None and self.lightbox.filename == filename:
            self.lightbox.set_detail(detail)

    def show_upload_dialog(self) -> None:
        dlg = UploadDialog(
            self.upload_service, self.runner, on_finished=self.upload_finished, parent=self.parent
        )
        dlg.exec()

    def _get_highlighted_values(self) -> dict[str, str]:
        names = self.highlighted_provider()
        if not names:
            return {}
        record = self.vm.sync.find(names[0])
        if record is None:
            return {}
        return {f: field_text(record, f) for f in SELECT_FIELDS}
