"""Callback dispatch for runner notifications.

A Signal holds an ordered list of listeners and calls them synchronously
when emitted. Connecting returns a Subscription handle that the owner
keeps and unsubscribes explicitly once it is no longer interested.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, ParamSpec, final

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger(__name__)

P = ParamSpec("P")


@final
class Subscription(Generic[P]):
    """Handle for one listener connected to a Signal."""

    __slots__ = ("_callback", "_signal")

    def __init__(self, signal: Signal[P], callback: Callable[P, object]) -> None:
        self._signal: Signal[P] | None = signal
        self._callback = callback

    @property
    def active(self) -> bool:
        """Return True while the listener is still connected."""
        return self._signal is not None

    @property
    def callback(self) -> Callable[P, object]:
        """Return the connected callback."""
        return self._callback

    def unsubscribe(self) -> None:
        """Disconnect the listener. Calling this more than once is harmless."""
        signal, self._signal = self._signal, None
        if signal is not None:
            signal._disconnect(self)  # noqa: SLF001


@final
class Signal(Generic[P]):
    """Synchronous, ordered notification source.

    Listeners run on the caller's thread in connection order. A listener
    that raises is logged and skipped so that the emitting reaction path
    is never interrupted by a collaborator.
    """

    __slots__ = ("_name", "_subscriptions")

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._subscriptions: list[Subscription[P]] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def connect(self, callback: Callable[P, object]) -> Subscription[P]:
        """Connect a listener.

        Args:
            callback: Called with the emitted arguments.

        Returns:
            The subscription handle for later disconnection.
        """
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _disconnect(self, subscription: Subscription[P]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Call every connected listener.

        Listeners disconnected during dispatch are not called afterwards;
        listeners connected during dispatch are first called on the next emit.
        """
        for subscription in tuple(self._subscriptions):
            if not subscription.active:
                continue
            try:
                _ = subscription.callback(*args, **kwargs)
            except Exception:  # noqa: BLE001
                # Listener errors must not break the emitting state machine
                logger.exception("listener_failed", signal=self._name)
