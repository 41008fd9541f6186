"""
Bounded waits for electrs to catch up with the node.

Both give up silently after roughly a minute: callers that need the
postcondition must check it themselves afterwards.
"""

from collections.abc import Callable
from typing import Any

import backoff

from electrsd.electrum import ElectrumClient
from electrsd.errors import ElectrumClientError
from electrsd.logging_config import get_logger

log = get_logger(__name__)

WAIT_TRIES = 600
WAIT_INTERVAL = 0.1


def wait_height(
    client: ElectrumClient,
    height: int,
    tries: int = WAIT_TRIES,
    interval: float = WAIT_INTERVAL,
) -> bool:
    """Wait until electrs serves the block header at `height`. Returns whether it did."""

    def header_available() -> bool:
        try:
            client.block_header_raw(height)
        except ElectrumClientError:
            return False
        return True

    return _poll_until(header_available, tries, interval, what=f"height {height}")


def wait_tx(
    client: ElectrumClient,
    txid: str,
    tries: int = WAIT_TRIES,
    interval: float = WAIT_INTERVAL,
) -> bool:
    """
    Wait until electrs has indexed `txid`. Returns whether it did.

    Fetching the raw transaction is not enough, the script history index is
    written separately, so the first output's script history must list the
    transaction too. Transaction updates are atomic, one script is enough.
    """
    # electrs reports lowercase hex
    txid = txid.lower()

    def indexed() -> bool:
        try:
            tx = client.transaction_get(txid)
        except ElectrumClientError:
            return False

        # nothing to index beyond the transaction itself
        if not tx.outputs:
            return True

        history = client.script_get_history(tx.outputs[0].script_pubkey)
        return any(entry.tx_hash.lower() == txid for entry in history)

    return _poll_until(indexed, tries, interval, what=f"tx {txid}")


def _poll_until(check: Callable[[], bool], tries: int, interval: float, what: str) -> bool:
    def on_giveup(details: Any) -> None:
        log.debug("Gave up waiting for electrs", waiting_for=what, tries=details["tries"])

    poll = backoff.on_predicate(
        backoff.constant,
        interval=interval,
        max_tries=tries,
        jitter=None,
        logger=None,
        on_giveup=on_giveup,
    )(check)
    return bool(poll())
