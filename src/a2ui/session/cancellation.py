"""Cooperative cancellation for stream readers."""


class CancellationToken:
    """
    Explicit cancellation flag checked between chunk reads.

    Cancelling is one-way; a new session gets a new token.
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"
