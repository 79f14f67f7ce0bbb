"""Shared test fixtures for routekit.

Provides a hand-driven transport double, sessions and providers wired to it,
and the global-state resets every test relies on. These fixtures are
automatically discovered by pytest and available to all test modules without
explicit imports.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Optional

import httpx
import pytest

from routekit.exceptions import RoutekitError
from routekit.models import DraftRequest, TransportConfig
from routekit.output import OutputManager, reset_output, set_output
from routekit.provider import HTTPProvider
from routekit.session import Session, reset_default_session
from routekit.transport import DeliveryCallback


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    """Silence diagnostics and reset the global output and default session.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test and the test finishes, the cached references become stale.
    """
    for var in [
        "ROUTEKIT_CONFIG",
        "ROUTEKIT_TIMEOUT",
        "ROUTEKIT_VERIFY_SSL",
        "ROUTEKIT_FOLLOW_REDIRECTS",
        "ROUTEKIT_MAX_WORKERS",
        "ROUTEKIT_USER_AGENT",
    ]:
        monkeypatch.delenv(var, raising=False)
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_default_session()
    reset_output()


# ---------------------------------------------------------------------------
# Transport double
# ---------------------------------------------------------------------------


class ManualTransport:
    """Transport that records tasks and only completes them when told to.

    ``respond`` and ``fail`` report an outcome through the delegate
    installed by the session, exactly like a real transport would.
    """

    def __init__(self) -> None:
        self.delegate: Optional[DeliveryCallback] = None
        self.drafts: dict[int, DraftRequest] = {}
        self.started: list[int] = []
        self.closed = False
        self.refuse_with: Optional[Exception] = None
        self._ids = itertools.count(1)

    def set_delegate(self, callback: DeliveryCallback) -> None:
        self.delegate = callback

    def create_task(self, draft: DraftRequest) -> int:
        if self.refuse_with is not None:
            raise self.refuse_with
        task_id = next(self._ids)
        self.drafts[task_id] = draft
        return task_id

    def start(self, task_id: int) -> None:
        self.started.append(task_id)

    def close(self) -> None:
        self.closed = True

    def respond(self, task_id: int, status_code: int = 200, **kwargs: Any) -> httpx.Response:
        draft = self.drafts[task_id]
        response = httpx.Response(
            status_code,
            request=httpx.Request(draft.method, draft.url),
            **kwargs,
        )
        assert self.delegate is not None
        self.delegate(task_id, response, None)
        return response

    def fail(self, task_id: int, error: BaseException) -> None:
        assert self.delegate is not None
        self.delegate(task_id, None, error)


@pytest.fixture
def transport() -> ManualTransport:
    return ManualTransport()


@pytest.fixture
def session(transport: ManualTransport) -> Session:
    """A session driving the manual transport; closed after the test."""
    s = Session(transport=transport)
    yield s
    s.close()


# ---------------------------------------------------------------------------
# Provider fixtures
# ---------------------------------------------------------------------------


class ExampleProvider(HTTPProvider):
    """Configurable provider bound to an explicit session."""

    def __init__(
        self,
        session: Session,
        base_url: str = "https://api.example.com/v1",
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        should_continue: Optional[Callable[[RoutekitError], bool]] = None,
    ) -> None:
        self._session = session
        self._base_url = base_url
        self._headers = headers or {}
        self._params = params or {}
        self._should_continue = should_continue

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def additional_headers(self) -> dict[str, str]:
        return self._headers

    @property
    def additional_params(self) -> dict[str, Any]:
        return self._params

    @property
    def session(self) -> Session:
        return self._session

    def should_continue(self, error: RoutekitError) -> bool:
        if self._should_continue is None:
            return super().should_continue(error)
        return self._should_continue(error)


@pytest.fixture
def make_provider(session: Session) -> Callable[..., ExampleProvider]:
    """Factory for providers sharing the test's session."""

    def _make(**kwargs: Any) -> ExampleProvider:
        return ExampleProvider(session, **kwargs)

    return _make


@pytest.fixture
def provider(make_provider: Callable[..., ExampleProvider]) -> ExampleProvider:
    return make_provider()


@pytest.fixture
def transport_config() -> TransportConfig:
    return TransportConfig(timeout=5, max_workers=2, user_agent="routekit-tests")


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
