"""Cooperative cancellation shared between caller and conversion thread."""

import threading


class CancellationToken:
    """Thread-safe cancellation flag.

    The token is callable so it can be handed to a converter directly as its
    ``is_cancelled`` predicate.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation at the next chunk boundary."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
