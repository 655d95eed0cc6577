"""
Interfaces to the ledger/wallet collaborator.

The oracle never composes, signs or propagates transactions itself; it hands
a description of the transaction to a ``LedgerClient``.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Protocol, Sequence

from .errors import InsufficientFundsError, SubmissionError
from .models import OutputSpec


class LedgerClient(Protocol):
    """What the publish queue needs from the wallet."""

    async def compose_and_submit(
        self,
        paying_addresses: List[str],
        outputs: Sequence[OutputSpec],
        messages: List[Dict[str, Any]],
        signer: Any,
    ) -> Any:
        """
        Build, sign and save a transaction; return the accepted joint.

        Raises:
            InsufficientFundsError: the paying addresses cannot cover the cost
            SubmissionError: any other composition failure
        """
        ...

    async def broadcast(self, joint: Any) -> None:
        """Propagate an accepted joint to the network."""
        ...


async def _maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


class CallbackLedgerClient:
    """
    Adapts a callback-style composer to ``LedgerClient``.

    ``compose(params)`` receives the transaction params with a ``callbacks``
    dict holding ``if_not_enough_funds``, ``if_error`` and ``if_ok``; exactly
    one of them must be invoked, from the event loop thread.
    """

    def __init__(self, compose: Callable[[Dict[str, Any]], Any], broadcast_joint: Callable[[Any], Any]):
        self._compose = compose
        self._broadcast_joint = broadcast_joint

    async def compose_and_submit(self, paying_addresses, outputs, messages, signer):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def settle_error(exc):
            if not future.done():
                future.set_exception(exc)

        def if_ok(joint):
            if not future.done():
                future.set_result(joint)

        params = {
            "paying_addresses": list(paying_addresses),
            "outputs": [o.to_dict() for o in outputs],
            "messages": messages,
            "signer": signer,
            "callbacks": {
                "if_not_enough_funds": lambda err: settle_error(InsufficientFundsError(str(err))),
                "if_error": lambda err: settle_error(SubmissionError(str(err))),
                "if_ok": if_ok,
            },
        }

        try:
            await _maybe_await(self._compose(params))
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(f"compose failed: {e}") from e

        return await future

    async def broadcast(self, joint):
        try:
            await _maybe_await(self._broadcast_joint(joint))
        except Exception as e:
            raise SubmissionError(f"broadcast failed: {e}") from e
