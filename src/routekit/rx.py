"""ReactiveX observables over request handles.

Each helper wraps a :class:`~routekit.request.Request` in a cold
:class:`reactivex.Observable` that emits one decoded value and completes,
or emits a single error::

    observe_object(provider.request(route), User).subscribe(
        on_next=show,
        on_error=report,
    )

The completion callback is registered when the observable is subscribed.
A handle has a single completion slot, so subscribe once per request.
Disposing the subscription stops delivery to that observer only; the
exchange itself keeps running.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, TypeVar

import reactivex
from reactivex import Observable, abc
from reactivex.disposable import Disposable

from routekit.exceptions import RoutekitError
from routekit.request import Request, ResultCallback

T = TypeVar("T")

Register = Callable[[ResultCallback], Request]


def observe_json(request: Request) -> Observable[Any]:
    """Emit the JSON-decoded body of *request*."""
    return _observe(request.on_json)


def observe_object(request: Request, model: type[T]) -> Observable[T]:
    """Emit the body of *request* decoded into *model*."""
    return _observe(lambda callback: request.on_object(model, callback))


def observe_list(
    request: Request,
    model: type[T],
    root_key: Optional[str] = None,
) -> Observable[list[T]]:
    """Emit the body of *request* (or the list at *root_key*) as ``list[model]``."""
    return _observe(lambda callback: request.on_list(model, callback, root_key))


def _observe(register: Register) -> Observable[Any]:
    def subscribe(
        observer: abc.ObserverBase[Any],
        scheduler: Optional[abc.SchedulerBase] = None,
    ) -> abc.DisposableBase:
        disposed = threading.Event()

        def on_result(value: Any, error: Optional[RoutekitError]) -> None:
            if disposed.is_set():
                return
            if error is not None:
                observer.on_error(error)
            else:
                observer.on_next(value)
                observer.on_completed()

        register(on_result)
        return Disposable(disposed.set)

    return reactivex.create(subscribe)


__all__ = ["observe_json", "observe_list", "observe_object"]
