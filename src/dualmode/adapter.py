"""
Turn a callback-accepting function into an ``asyncio.Future``.
The callback follows the ``callback(error, value, ...)`` convention: a truthy
error rejects the future, anything else resolves it with ``value``.
"""

from __future__ import annotations

import asyncio
import threading
import typing as t
from enum import StrEnum

import structlog

from dualmode.exceptions import OperationError

log = structlog.get_logger(__name__)

Callback = t.Callable[..., None]
CallbackOperation = t.Callable[[Callback], t.Any]
CallbackAdapter = t.Callable[[CallbackOperation], t.Any]


class SettlementState(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Settlement:
    """
    Once-only transition guard for a pending future.

    The first call to ``resolve`` or ``reject`` moves the state out of
    ``PENDING`` and settles the future. Every later attempt is ignored and
    logged as a warning.

    Parameters
    ----------
    future : asyncio.Future
        Future to settle.
    loop : asyncio.AbstractEventLoop
        Loop owning ``future``. Settlements coming from another thread are
        scheduled on it with ``call_soon_threadsafe``.
    """

    def __init__(self, future: asyncio.Future[t.Any], loop: asyncio.AbstractEventLoop) -> None:
        self.future = future
        self.state = SettlementState.PENDING
        self._loop = loop
        self._lock = threading.Lock()

    def resolve(self, value: t.Any) -> bool:
        """
        Resolve the future with ``value``.

        Returns
        -------
        bool
            ``True`` if this call settled the future, ``False`` if it was
            already settled.
        """
        return self._transition(state=SettlementState.RESOLVED, payload=value)

    def reject(self, error: BaseException) -> bool:
        """
        Reject the future with ``error``.

        Returns
        -------
        bool
            ``True`` if this call settled the future, ``False`` if it was
            already settled.
        """
        return self._transition(state=SettlementState.REJECTED, payload=error)

    def _transition(self, state: SettlementState, payload: t.Any) -> bool:
        with self._lock:
            if self.state is not SettlementState.PENDING:
                log.warning(
                    "Ignoring repeated settlement",
                    settled_as=str(self.state),
                    attempted=str(state),
                )
                return False
            self.state = state

        if _running_loop() is self._loop:
            self._apply(state=state, payload=payload)
        else:
            self._loop.call_soon_threadsafe(self._apply, state, payload)
        return True

    def _apply(self, state: SettlementState, payload: t.Any) -> None:
        # The consumer may have cancelled the future while it was pending.
        if self.future.done():
            log.debug("Future already done, dropping settlement", state=str(state))
            return
        if state is SettlementState.RESOLVED:
            self.future.set_result(payload)
        else:
            self.future.set_exception(payload)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def adapt(
    op: CallbackOperation, *, loop: asyncio.AbstractEventLoop | None = None
) -> asyncio.Future[t.Any]:
    """
    Run a callback-style function and expose its outcome as a future.

    Parameters
    ----------
    op : CallbackOperation
        One-argument function. It is called immediately with a callback taking
        ``(error=None, value=None, *extra)``.
    loop : asyncio.AbstractEventLoop | None, optional
        Loop owning the returned future. Defaults to the running loop.

    Returns
    -------
    asyncio.Future
        Future resolved with ``value`` or rejected with ``error``. A truthy
        error that is not an exception is wrapped in ``OperationError``.
        An exception raised by ``op`` itself rejects the future.

    Raises
    ------
    RuntimeError
        If no ``loop`` is given and no event loop is running.
    """
    loop = loop or asyncio.get_running_loop()
    settlement = Settlement(future=loop.create_future(), loop=loop)

    def callback(error: t.Any = None, value: t.Any = None, *extra: t.Any) -> None:
        if error:
            if not isinstance(error, BaseException):
                error = OperationError(error)
            settlement.reject(error=error)
        else:
            settlement.resolve(value=value)

    try:
        op(callback)
    except Exception as exc:
        settlement.reject(error=exc)

    return settlement.future
