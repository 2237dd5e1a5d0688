from __future__ import annotations

import functools
from typing import Any, Callable

from revenant.core.promise import Promise


def task(*, requires_open: bool = True) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Expose a session method through both delivery paths.

    The decorated method is the operation body: it runs on the session's
    worker thread and either returns a result or raises. The public wrapper
    accepts an optional completion callback (keyword ``callback=`` or a
    trailing positional callable):

    - with a callback, ``callback(error, result)`` is invoked exactly once and
      the call returns None;
    - without one, the call returns a :class:`Promise` for the result.

    ``requires_open`` makes the operation fail with NotOpenError, before
    touching the driver, unless the session has an open page.
    """

    def decorator(operation: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(operation)
        def wrapper(session: Any, *args: Any, callback: Callable[..., None] | None = None, **kwargs: Any):
            if callback is None and args and callable(args[-1]):
                *args, callback = args
            promise: Promise = session._submit(operation, requires_open, *args, **kwargs)
            if callback is None:
                return promise
            promise.to_callback(callback)
            return None

        return wrapper

    return decorator
