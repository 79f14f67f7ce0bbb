"""Transports that perform the byte-level HTTP exchange for routekit.

Classes:
    :class:`Transport` -- the protocol a session drives: create a task from a
    draft request, start it, and receive its outcome through a delivery
    callback.
    :class:`HttpxTransport` -- the default implementation, backed by
    :class:`httpx.Client` and a background worker pool.

Any object with the same four methods can be handed to
:class:`~routekit.session.Session`; tests use :class:`httpx.MockTransport`
inside an :class:`HttpxTransport` or a hand-driven transport.
"""

from routekit.transport.base import DeliveryCallback, Transport
from routekit.transport.httpx_transport import HttpxTransport

__all__ = ["DeliveryCallback", "HttpxTransport", "Transport"]
