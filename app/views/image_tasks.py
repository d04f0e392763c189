from __future__ import annotations

from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool
from loguru import logger


class _ImageTask(QRunnable):
    """QRunnable for background thumbnail loading.

    Emits `receiver.imageLoaded(token, filename, image)` upon completion. The
    receiver is expected to own a Qt `Signal(str, str, object)` named
    `imageLoaded`.
    """

    def __init__(
        self, *, filename: str, url: str, side: int, service: Any, receiver: QObject, token: str
    ) -> None:
        super().__init__()
        self._filename = filename
        self._url = url
        self._side = side
        self._service = service
        self._receiver = receiver
        self._token = token

    def run(self) -> None:  # type: ignore[override]
        try:
            img = self._service.get_thumbnail(self._url, self._side)
        except Exception as ex:  # pragma: no cover - GUI background task
            logger.error("Image task failed: {}", ex)
            img = None
        # Queued back to the receiver's (UI) thread
        receiver = self._receiver
        receiver.imageLoaded.emit(self._token, self._filename, img)  # type: ignore[attr-defined]


class ImageTaskRunner:
    """Dispatches image load tasks to the global thread pool.

    Tokens:
    - Lightbox image: "full|{filename}|{side}"
    - Grid thumbnail: "grid|{filename}|{side}"
    """

    def __init__(self, *, service: Any, receiver: QObject) -> None:
        self._service = service
        self._receiver = receiver
        self._pool = QThreadPool.globalInstance()

    def request_full_image(self, filename: str, url: str, max_side: int) -> str:
        """Request the high-res image for the lightbox. Returns the token string."""
        token = f"full|{filename}|{max_side}"
        self._start(filename, url, max_side, token)
        return token

    def request_grid_thumbnail(self, filename: str, url: str, thumb_side: int) -> str:
        """Request a grid thumbnail for `filename` with given `thumb_side`. Returns token."""
        token = f"grid|{filename}|{thumb_side}"
        self._start(filename, url, thumb_side, token)
        return token

    def _start(self, filename: str, url: str, side: int, token: str) -> None:
        if self._service is None or not url:
            return
        self._pool.start(
            _ImageTask(
                filename=filename,
                url=url,
                side=side,
                service=self._service,
                receiver=self._receiver,
                token=token,
            )
        )
