"""httpx-backed :class:`~routekit.transport.base.Transport` implementation.

:class:`HttpxTransport` wraps a blocking :class:`httpx.Client` and runs each
started task on a background worker pool, so :meth:`HttpxTransport.start`
returns immediately. Outcomes are reported through the delivery callback
installed with :meth:`HttpxTransport.set_delegate`:

- a fully read :class:`httpx.Response` for every completed exchange,
  whatever its status code;
- the httpx exception for network failures (timeouts, DNS resolution,
  refused connections, malformed URLs);
- any other exception raised while sending, as is.
"""

from __future__ import annotations

import itertools
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import httpx

from routekit.config import load_transport_config
from routekit.models import DraftRequest, TransportConfig
from routekit.output import debug
from routekit.transport.base import DeliveryCallback


class HttpxTransport:
    """Transport that performs exchanges with :class:`httpx.Client`.

    Args:
        config: Timeout, TLS, redirect, worker-count and User-Agent
            settings. Resolved with
            :func:`~routekit.config.load_transport_config` when omitted.
        client: Pre-built client, e.g. one using :class:`httpx.MockTransport`
            in tests. When given, ``config`` only controls the worker pool
            and the User-Agent.

    Example::

        transport = HttpxTransport()
        transport.set_delegate(lambda task_id, response, error: ...)
        task_id = transport.create_task(DraftRequest(url="https://example.com"))
        transport.start(task_id)
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config or load_transport_config()
        self._client = client or httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
        )
        self._workers = ThreadPoolExecutor(
            max_workers=self._config.max_workers,
            thread_name_prefix="routekit-io",
        )
        self._task_ids = itertools.count(1)
        self._tasks: dict[int, httpx.Request] = {}
        self._lock = threading.Lock()
        self._delegate: Optional[DeliveryCallback] = None

    @property
    def config(self) -> TransportConfig:
        return self._config

    def set_delegate(self, callback: DeliveryCallback) -> None:
        """Install the callback that receives every task outcome."""
        self._delegate = callback

    def create_task(self, draft: DraftRequest) -> int:
        """Build an :class:`httpx.Request` from *draft* and return its task id.

        The task does not run until :meth:`start` is called.
        """
        headers = dict(draft.headers)
        if draft.get_header("User-Agent") is None:
            headers["User-Agent"] = self._config.user_agent

        request = self._client.build_request(
            draft.method,
            draft.url,
            headers=headers,
            content=draft.body,
        )
        with self._lock:
            task_id = next(self._task_ids)
            self._tasks[task_id] = request
        return task_id

    def start(self, task_id: int) -> None:
        """Run task *task_id* on the worker pool.

        Raises:
            KeyError: If the task id is unknown or was already started.
        """
        with self._lock:
            request = self._tasks.pop(task_id)
        debug(f"Starting task {task_id}: {request.method} {request.url}")
        self._workers.submit(self._run, task_id, request)

    def close(self) -> None:
        """Wait for running tasks, then close the underlying client."""
        self._workers.shutdown(wait=True)
        self._client.close()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _run(self, task_id: int, request: httpx.Request) -> None:
        response: Optional[httpx.Response] = None
        error: Optional[BaseException] = None
        try:
            response = self._client.send(request)
            response.read()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            response = None
            error = exc
        except Exception as exc:  # noqa: BLE001
            # Raised by a custom transport or mount; still reported once.
            debug(f"Task {task_id} raised {type(exc).__name__}: {exc}")
            response = None
            error = exc
        finally:
            if response is not None:
                response.close()

        if self._delegate is None:
            debug(f"Task {task_id} finished with no delegate installed")
            return
        self._delegate(task_id, response, error)
