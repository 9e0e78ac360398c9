# mutualpool/services/transfers.py
"""Outbox of payments leaving the ledger (refunds, payouts, sweeps)."""

import threading
from typing import Any, List, Optional

from mutualpool.core.constants import TransferReason
from mutualpool.core.logging import get_logger
from mutualpool.models.ledger import Transfer

logger = get_logger(__name__)


class TransferOutbox:
    """Append-only record of transfers handed to the payment rail."""

    def __init__(self):
        self._transfers: List[Transfer] = []
        self._lock = threading.Lock()

    def send(self, recipient: str, amount: int, reason: TransferReason, **reference: Any) -> Transfer:
        transfer = Transfer(recipient=recipient, amount=amount, reason=reason, reference=reference)
        with self._lock:
            self._transfers.append(transfer)
        logger.info(f"Transfer queued: {reason.value}", recipient=recipient, amount=amount)
        return transfer

    def list(self, recipient: Optional[str] = None) -> List[Transfer]:
        return [t for t in self._transfers if recipient is None or t.recipient == recipient]
