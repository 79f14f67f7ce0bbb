"""Tests for the task registry."""

from __future__ import annotations

import threading

import pytest

from routekit.models import DraftRequest
from routekit.registry import TaskRegistry
from routekit.request import Request


def _request(provider) -> Request:
    return Request(DraftRequest(url="https://api.example.com/"), provider)


class TestTaskRegistry:
    def test_register_and_pop(self, provider) -> None:
        registry = TaskRegistry()
        request = _request(provider)
        registry.register(1, request)
        assert 1 in registry
        assert registry.get(1) is request
        assert registry.pop(1) is request
        assert 1 not in registry
        assert len(registry) == 0

    def test_pop_unknown_returns_none(self) -> None:
        assert TaskRegistry().pop(42) is None

    def test_duplicate_id_rejected(self, provider) -> None:
        registry = TaskRegistry()
        registry.register(1, _request(provider))
        with pytest.raises(ValueError, match="already registered"):
            registry.register(1, _request(provider))

    def test_concurrent_registration_loses_nothing(self, provider) -> None:
        registry = TaskRegistry()
        barrier = threading.Barrier(8)

        def worker(offset: int) -> None:
            barrier.wait()
            for i in range(200):
                registry.register(offset * 1000 + i, _request(provider))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 1600
