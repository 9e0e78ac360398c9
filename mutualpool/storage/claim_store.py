# mutualpool/storage/claim_store.py
"""Claim storage implementation."""

from typing import Dict, Any, Optional, List, Set

from mutualpool.storage.base import BaseStore
from mutualpool.models.claim import Claim
from mutualpool.core.constants import ClaimStatus


class ClaimStore(BaseStore[Claim]):
    """Storage for claim records.

    Keeps two indexes: every claim id per claimant, and the claim ids
    currently ``approved`` per claimant, so settlement never scans the
    whole claim table.
    """

    kind = "Claim"

    def __init__(self, data_dir: Optional[str] = None):
        self._by_claimant: Dict[str, Set[int]] = {}
        self._approved_by_claimant: Dict[str, Set[int]] = {}
        super().__init__(data_dir=data_dir, filename="claims.json")

    def _get_id(self, entity: Claim) -> int:
        return entity.claim_id

    def _serialize(self, entity: Claim) -> Dict[str, Any]:
        return entity.model_dump(mode='json')

    def _deserialize(self, data: Dict[str, Any]) -> Claim:
        return Claim.model_validate(data)

    def _copy(self, entity: Claim) -> Claim:
        return entity.snapshot()

    def _index(self, entity: Claim, previous: Optional[Claim]):
        self._by_claimant.setdefault(entity.claimant, set()).add(entity.claim_id)
        approved = self._approved_by_claimant.setdefault(entity.claimant, set())
        if entity.status == ClaimStatus.APPROVED:
            approved.add(entity.claim_id)
        else:
            approved.discard(entity.claim_id)

    def _indexes(self) -> Dict[str, Any]:
        return {
            "by_claimant": self._by_claimant,
            "approved_by_claimant": self._approved_by_claimant,
        }

    def _restore_indexes(self, indexes: Dict[str, Any]):
        self._by_claimant = indexes["by_claimant"]
        self._approved_by_claimant = indexes["approved_by_claimant"]

    # Custom query methods
    def get_ids_by_claimant(self, claimant: str) -> List[int]:
        self._load_all()
        return sorted(self._by_claimant.get(claimant, set()))

    def get_approved_ids(self, claimant: str) -> List[int]:
        """Approved, not yet paid claim ids of a claimant."""
        self._load_all()
        return sorted(self._approved_by_claimant.get(claimant, set()))

    def count_by_status(self) -> Dict[str, int]:
        counts = {status: 0 for status in ClaimStatus.values()}
        for claim in self._load_all().values():
            counts[claim.status.value] += 1
        return counts
