"""Transport protocol consumed by :class:`~routekit.session.Session`."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

import httpx

from routekit.models import DraftRequest

DeliveryCallback = Callable[[int, Optional[httpx.Response], Optional[BaseException]], None]
"""``callback(task_id, response, error)`` invoked once per started task."""


class Transport(Protocol):
    """Minimal capability set for performing request/response exchanges.

    A transport turns a :class:`~routekit.models.DraftRequest` into a task,
    runs it when started, and reports the outcome of every started task
    exactly once through the registered delivery callback. The response
    body must be fully read before delivery so that ``response.content``
    is available to validation.
    """

    def set_delegate(self, callback: DeliveryCallback) -> None: ...

    def create_task(self, draft: DraftRequest) -> int: ...

    def start(self, task_id: int) -> None: ...

    def close(self) -> None:  # pragma: no cover - optional for test doubles
        ...
