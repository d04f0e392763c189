from __future__ import annotations

from collections.abc import Callable
import itertools
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal
from loguru import logger

ResultCallback = Callable[[Any, BaseException | None], None]


class _GatewayTask(QRunnable):
    """QRunnable running one blocking gateway call.

    Emits `runner.taskFinished(token, result, error)`; exactly one of
    `result`/`error` is meaningful.
    """

    def __init__(self, *, func: Callable[[], Any], runner: GatewayTaskRunner, token: str) -> None:
        super().__init__()
        self._func = func
        self._runner = runner
        self._token = token

    def run(self) -> None:  # type: ignore[override]
        result: Any = None
        error: BaseException | None = None
        try:
            result = self._func()
        except Exception as ex:  # pragma: no cover - GUI background task
            logger.error("Gateway task {} failed: {}", self._token, ex)
            error = ex
        self._runner.taskFinished.emit(self._token, result, error)


class GatewayTaskRunner(QObject):
    """Runs blocking calls on the global thread pool.

    Callbacks are invoked on the thread owning the runner (the UI thread)
    through the queued `taskFinished` signal.
    """

    taskFinished = Signal(str, object, object)  # token, result, error

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pool = QThreadPool.globalInstance()
        self._callbacks: dict[str, ResultCallback] = {}
        self._ids = itertools.count(1)
        self.taskFinished.connect(self._dispatch)

    def submit(self, func: Callable[[], Any], callback: ResultCallback, label: str = "task") -> str:
        """Run `func` off the UI thread and deliver `(result, error)` to `callback`."""
        token = f"{label}|{next(self._ids)}"
        self._callbacks[token] = callback
        self._pool.start(_GatewayTask(func=func, runner=self, token=token))
        return token

    @property
    def pending_count(self) -> int:
        return len(self._callbacks)

    def _dispatch(self, token: str, result: Any, error: Any) -> None:
        callback = self._callbacks.pop(token, None)
        if callback is None:
            return
        callback(result, error)
