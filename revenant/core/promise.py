from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future
from functools import partial
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

Outcome = tuple[Optional[BaseException], Any]
Callback = Callable[[Optional[BaseException], Any], None]


def settle(future: Future) -> Outcome:
    """Return ``(error, value)`` for a completed future."""
    if future.cancelled():
        return CancelledError(), None
    error = future.exception()
    if error is not None:
        return error, None
    return None, future.result()


def _resolve(target: Future, error: Optional[BaseException], value: Any) -> None:
    if error is not None:
        target.set_exception(error)
    else:
        target.set_result(value)


def _adopt(target: Future, produced: Any) -> None:
    if isinstance(produced, Promise):
        produced = produced._future
    if isinstance(produced, Future):
        produced.add_done_callback(lambda done: _resolve(target, *settle(done)))
    else:
        target.set_result(produced)


class Promise:
    """Chainable handle over a single value-or-error channel.

    Each ``then``/``fail``/``always`` call returns a new Promise for the next
    link of the chain. A rejection skips every success handler until a
    failure handler is reached; whatever that handler returns (or raises)
    settles the following link, so a failure raised inside a failure handler
    reaches the next failure handler downstream.

    Handlers run on the thread that completes the underlying future, or
    immediately on the calling thread when it has already completed.
    """

    def __init__(self, future: Future | None = None) -> None:
        self._future: Future = future if future is not None else Future()

    @classmethod
    def resolved(cls, value: Any = None) -> "Promise":
        future: Future = Future()
        future.set_result(value)
        return cls(future)

    @classmethod
    def rejected(cls, error: BaseException) -> "Promise":
        future: Future = Future()
        future.set_exception(error)
        return cls(future)

    @classmethod
    def all(cls, promises: Iterable["Promise"]) -> "Promise":
        """Resolve with every value in input order, or reject with the first failure."""
        items = list(promises)
        combined: Future = Future()
        if not items:
            combined.set_result([])
            return cls(combined)

        results: list[Any] = [None] * len(items)
        state = {"pending": len(items), "finished": False}
        lock = threading.Lock()

        def _collect(index: int, done: Future) -> None:
            error, value = settle(done)
            with lock:
                if state["finished"]:
                    return
                if error is None:
                    results[index] = value
                    state["pending"] -= 1
                    if state["pending"]:
                        return
                state["finished"] = True
            _resolve(combined, error, list(results))

        for index, promise in enumerate(items):
            promise._future.add_done_callback(partial(_collect, index))
        return cls(combined)

    def then(
        self,
        on_success: Callable[[Any], Any] | None = None,
        on_failure: Callable[[BaseException], Any] | None = None,
    ) -> "Promise":
        """Chain handlers for the outcome; the returned promise settles with theirs.

        A handler that raises rejects the returned promise. ``SystemExit`` and
        ``KeyboardInterrupt`` also reject it and are then re-raised.
        """
        following: Future = Future()

        def _step(done: Future) -> None:
            error, value = settle(done)
            handler = on_success if error is None else on_failure
            if handler is None:
                _resolve(following, error, value)
                return
            try:
                produced = handler(value) if error is None else handler(error)
            except BaseException as exc:
                following.set_exception(exc)
                if not isinstance(exc, Exception):
                    raise
                return
            _adopt(following, produced)

        self._future.add_done_callback(_step)
        return Promise(following)

    def fail(self, on_failure: Callable[[BaseException], Any]) -> "Promise":
        return self.then(None, on_failure)

    def always(self, handler: Callable[[], Any]) -> "Promise":
        """Run ``handler()`` on either outcome and pass the original outcome through.

        If the handler raises (or returns a promise that rejects) the chain
        continues with that failure instead.
        """
        following: Future = Future()

        def _step(done: Future) -> None:
            outcome = settle(done)
            try:
                produced = handler()
            except BaseException as exc:
                following.set_exception(exc)
                if not isinstance(exc, Exception):
                    raise
                return
            if isinstance(produced, Promise):
                produced = produced._future
            if not isinstance(produced, Future):
                _resolve(following, *outcome)
                return

            def _after(cleanup: Future) -> None:
                error, _ = settle(cleanup)
                if error is not None:
                    following.set_exception(error)
                else:
                    _resolve(following, *outcome)

            produced.add_done_callback(_after)

        self._future.add_done_callback(_step)
        return Promise(following)

    def to_callback(self, callback: Callback) -> None:
        """Deliver the outcome once as ``callback(error, value)``."""

        def _deliver(done: Future) -> None:
            error, value = settle(done)
            try:
                callback(error, value)
            except Exception:
                logger.exception("Completion callback raised")

        self._future.add_done_callback(_deliver)

    def result(self, timeout: float | None = None) -> Any:
        """Block until settled; return the value or raise the failure.

        Never call this from a handler running on the worker thread of the
        session whose operation is awaited: the operation cannot start until
        the handler returns.
        """
        return self._future.result(timeout)

    def exception(self, timeout: float | None = None) -> Optional[BaseException]:
        return self._future.exception(timeout)

    def is_settled(self) -> bool:
        return self._future.done()

    def __repr__(self) -> str:
        if not self._future.done():
            return "<Promise pending>"
        error, value = settle(self._future)
        if error is not None:
            return f"<Promise rejected {error!r}>"
        return f"<Promise resolved {value!r}>"
