"""Request handles -- one per submitted route.

A :class:`Request` represents a single exchange. It is created by
:meth:`~routekit.provider.HTTPProvider.request`, receives the transport's
outcome from the session delegate through :meth:`Request.deliver`, runs the
owning provider's validation policy, and hands the result to the caller's
completion callback exactly once.

Lifecycle::

    PENDING --deliver()/fail()--> COMPLETED
    PENDING --deliver(), should_continue() is False--> ABANDONED

``ABANDONED`` is terminal and silent: the completion callback never fires.
It exists so that providers can intercept certain failures (for example a
401 that triggers re-authentication elsewhere) without surfacing them.
Nothing but the caller keeps an abandoned handle alive.

Failures detected before anything is sent (unencodable parameters, an
invalid URL) go through :meth:`Request.fail` and reach the caller through
the same callback as transport and validation failures.
"""

from __future__ import annotations

import enum
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

import httpx

from routekit.decoding import decode_json, decode_list, decode_object
from routekit.exceptions import DeserializationError, RoutekitError, UnknownError
from routekit.models import DraftRequest
from routekit.output import debug

if TYPE_CHECKING:
    from routekit.provider import HTTPProvider

T = TypeVar("T")

Completion = Callable[[Optional[httpx.Response], Optional[RoutekitError]], None]
"""``callback(response, error)``; exactly one of the two is ``None``."""

ResultCallback = Callable[[Any, Optional[RoutekitError]], None]
"""``callback(value, error)`` used by the decoding helpers."""


class RequestState(str, enum.Enum):
    """Lifecycle states of a :class:`Request`."""

    PENDING = "pending"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class Request:
    """Single-use handle for one in-flight exchange.

    The handle holds one completion slot: registering a callback replaces
    the previous one. The result is delivered exactly once -- to the
    callback registered at completion time or, when the handle completed
    before any callback was registered (synchronous failures), to the first
    callback registered afterwards.

    Args:
        draft: The request as it was (or would have been) sent.
        provider: The provider whose ``validate`` and ``should_continue``
            policies apply to this exchange.
    """

    def __init__(self, draft: DraftRequest, provider: HTTPProvider) -> None:
        self._draft = draft
        self._provider = provider
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._state = RequestState.PENDING
        self._callback: Optional[Completion] = None
        self._fired = False
        self._response: Optional[httpx.Response] = None
        self._error: Optional[RoutekitError] = None
        self.task_id: Optional[int] = None

    def __repr__(self) -> str:
        return f"<Request {self._draft.method} {self._draft.url} [{self._state.value}]>"

    # ------------------------------------------------------------------ #
    # Read-only accessors
    # ------------------------------------------------------------------ #

    @property
    def draft(self) -> DraftRequest:
        return self._draft

    @property
    def provider(self) -> HTTPProvider:
        return self._provider

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def response(self) -> Optional[httpx.Response]:
        """The validated response, once the handle completed successfully."""
        return self._response

    @property
    def error(self) -> Optional[RoutekitError]:
        """The failure the handle completed with, if any."""
        return self._error

    # ------------------------------------------------------------------ #
    # Completion registration
    # ------------------------------------------------------------------ #

    def on_complete(self, callback: Completion) -> Request:
        """Register *callback* as the completion for this exchange.

        Returns the handle so registration can be chained onto
        ``provider.request(route)``.
        """
        with self._lock:
            self._callback = callback
            replay = self._state is RequestState.COMPLETED and not self._fired
            if replay:
                self._fired = True
        if replay:
            callback(self._response, self._error)
        return self

    def on_json(self, callback: ResultCallback) -> Request:
        """Register a completion that receives the JSON-decoded body."""
        return self.on_complete(_decoded(decode_json, callback))

    def on_object(self, model: type[T], callback: ResultCallback) -> Request:
        """Register a completion that receives the body decoded into *model*."""
        return self.on_complete(_decoded(lambda r: decode_object(r, model), callback))

    def on_list(
        self,
        model: type[T],
        callback: ResultCallback,
        root_key: Optional[str] = None,
    ) -> Request:
        """Register a completion that receives the body decoded into ``list[model]``.

        Args:
            model: Item type.
            callback: ``callback(items, error)``.
            root_key: Optional dotted path to the list inside the body,
                e.g. ``"data.items"``.
        """
        return self.on_complete(_decoded(lambda r: decode_list(r, model, root_key), callback))

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the handle completes and its callback, if any, has run.

        Returns:
            ``True`` once the handle is ``COMPLETED``; ``False`` if *timeout*
            expired first (always the case for an abandoned handle).
        """
        return self._done.wait(timeout)

    # ------------------------------------------------------------------ #
    # Outcome entry points
    # ------------------------------------------------------------------ #

    def deliver(
        self,
        response: Optional[httpx.Response],
        body: bytes,
        error: Optional[BaseException],
    ) -> None:
        """Receive the transport outcome and run the validation pipeline.

        A delivery to a handle that is no longer pending is ignored. If the
        provider's ``validate`` or ``should_continue`` raises, the handle
        completes with :class:`~routekit.exceptions.UnknownError`.
        """
        with self._lock:
            pending = self._state is RequestState.PENDING
        if not pending:
            debug(f"Ignoring repeated delivery for {self!r}")
            return

        try:
            failure = self._provider.validate(response, body, error)
            stop = failure is not None and not self._provider.should_continue(failure)
        except Exception as exc:  # noqa: BLE001
            debug(f"Provider policy for {self!r} raised {type(exc).__name__}: {exc}")
            self._finish(None, UnknownError(f"Response validation raised {type(exc).__name__}: {exc}"))
            return

        if stop:
            with self._lock:
                if self._state is RequestState.PENDING:
                    self._state = RequestState.ABANDONED
            debug(f"Provider stopped {self!r} after {failure}")
            return

        if failure is not None:
            self._finish(None, failure)
        else:
            self._finish(response, None)

    def fail(self, error: RoutekitError) -> None:
        """Complete the handle with *error* without running validation."""
        self._finish(None, error)

    def _finish(self, response: Optional[httpx.Response], error: Optional[RoutekitError]) -> None:
        with self._lock:
            if self._state is not RequestState.PENDING:
                return
            self._state = RequestState.COMPLETED
            self._response = response
            self._error = error
            callback = self._callback
            if callback is not None:
                self._fired = True
        try:
            if callback is not None:
                callback(response, error)
        finally:
            self._done.set()


def _decoded(decoder: Callable[[Optional[httpx.Response]], Any], callback: ResultCallback) -> Completion:
    def _complete(response: Optional[httpx.Response], error: Optional[RoutekitError]) -> None:
        if error is not None:
            callback(None, error)
            return
        try:
            value = decoder(response)
        except DeserializationError as exc:
            callback(None, exc)
            return
        callback(value, None)

    return _complete
