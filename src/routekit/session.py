"""Session -- the delegate that ties a transport to request handles.

A :class:`Session` owns one :class:`~routekit.transport.Transport` and one
:class:`~routekit.registry.TaskRegistry`. Providers submit drafts through
:meth:`Session.submit`; the transport later reports each outcome to the
session, which routes it to the handle registered for that task.

Every delivery runs on a single delegate thread, so the handles of one
session never see two outcomes concurrently. Submission may happen from any
thread: the registry is lock-guarded, and the handle is registered before
the transport is started so the outcome can never arrive first.

Providers that do not override
:attr:`~routekit.provider.HTTPProvider.session` share the default session
returned by :func:`get_default_session`.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional

import httpx

from routekit.models import DraftRequest, TransportConfig
from routekit.output import debug, warning
from routekit.registry import TaskRegistry
from routekit.transport import HttpxTransport, Transport

if TYPE_CHECKING:
    from routekit.request import Request


class Session:
    """Owner of a transport, its task registry, and the delegate queue.

    Args:
        transport: Transport to drive. Defaults to an
            :class:`~routekit.transport.HttpxTransport` built from *config*.
        config: Transport settings used when *transport* is omitted.

    Example::

        with Session() as session:
            provider = MyProvider(session=session)
            provider.request(Route(path="/users")).on_complete(handle)
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        config: Optional[TransportConfig] = None,
    ) -> None:
        self._transport: Transport = transport if transport is not None else HttpxTransport(config)
        self._registry = TaskRegistry()
        self._delegate_queue = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="routekit-delegate",
        )
        self._transport.set_delegate(self._enqueue)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def registry(self) -> TaskRegistry:
        return self._registry

    def submit(self, draft: DraftRequest, request: Request) -> int:
        """Create a transport task for *draft*, register *request*, and start it.

        Returns:
            The transport's task id, also stored on ``request.task_id``.
        """
        task_id = self._transport.create_task(draft)
        request.task_id = task_id
        self._registry.register(task_id, request)
        debug(f"Submitted task {task_id}: {draft.method} {draft.url}")
        self._transport.start(task_id)
        return task_id

    def deliver(
        self,
        task_id: int,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
    ) -> None:
        """Route the outcome of *task_id* to its request handle.

        Runs on the delegate thread for transport deliveries. Unknown task
        ids are reported and ignored.
        """
        request = self._registry.pop(task_id)
        if request is None:
            warning(f"Received a response for unknown task {task_id}; ignoring it")
            return
        body = response.content if response is not None else b""
        debug(f"Delivering task {task_id} to {request!r}")
        request.deliver(response, body, error)

    def close(self) -> None:
        """Drain pending deliveries, then close the transport."""
        self._transport.close()
        self._delegate_queue.shutdown(wait=True)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _enqueue(
        self,
        task_id: int,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
    ) -> None:
        self._delegate_queue.submit(self._dispatch, task_id, response, error)

    def _dispatch(
        self,
        task_id: int,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
    ) -> None:
        try:
            self.deliver(task_id, response, error)
        except Exception as exc:  # noqa: BLE001
            # Raised by a completion callback; the delegate thread keeps
            # serving other tasks.
            warning(f"Delivering task {task_id} raised {type(exc).__name__}: {exc}")


# ------------------------------------------------------------------ #
# Default session
# ------------------------------------------------------------------ #

_default_session: Optional[Session] = None
_default_lock = threading.Lock()


def get_default_session() -> Session:
    """Return the shared default :class:`Session`, creating it lazily."""
    global _default_session
    with _default_lock:
        if _default_session is None:
            _default_session = Session()
        return _default_session


def set_default_session(session: Session) -> None:
    """Install *session* as the shared default."""
    global _default_session
    with _default_lock:
        _default_session = session


def reset_default_session() -> None:
    """Close and forget the shared default session.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _default_session
    with _default_lock:
        session, _default_session = _default_session, None
    if session is not None:
        session.close()
