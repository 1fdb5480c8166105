"""All-or-nothing envelope around a single call.

Snapshots kitty state, ledger balances and the pending-event buffer on
entry. If the body raises, everything is restored and the exception
propagates unchanged.

Usage:
    with transactional(state, ledger, pending):
        ops.buy("bob", dna, 150)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .events import PendingEvents
from .ledger import Ledger
from .state import KittyState

logger = logging.getLogger(__name__)


@contextmanager
def transactional(
    state: KittyState,
    ledger: Ledger,
    pending: PendingEvents,
) -> Iterator[None]:
    """Roll back state, balances and buffered events if the body raises."""
    state_snapshot = state.snapshot()
    balances_snapshot = ledger.snapshot()
    mark = pending.mark()
    try:
        yield
    except BaseException as e:
        state.restore(state_snapshot)
        ledger.restore(balances_snapshot)
        pending.truncate(mark)
        logger.debug("Rolled back call: %s", e)
        raise
