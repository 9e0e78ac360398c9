# mutualpool/storage/policy_store.py
"""Policy storage implementation."""

from typing import Dict, Any, Optional, List, Set

from mutualpool.storage.base import BaseStore
from mutualpool.models.policy import Policy


class PolicyStore(BaseStore[Policy]):
    """Storage for policy records with a holder index."""

    kind = "Policy"

    def __init__(self, data_dir: Optional[str] = None):
        self._by_holder: Dict[str, Set[int]] = {}
        super().__init__(data_dir=data_dir, filename="policies.json")

    def _get_id(self, entity: Policy) -> int:
        return entity.policy_id

    def _serialize(self, entity: Policy) -> Dict[str, Any]:
        return entity.model_dump(mode='json')

    def _deserialize(self, data: Dict[str, Any]) -> Policy:
        return Policy.model_validate(data)

    def _copy(self, entity: Policy) -> Policy:
        return entity.snapshot()

    def _index(self, entity: Policy, previous: Optional[Policy]):
        # holder never changes for a policy, so only inserts touch the index
        self._by_holder.setdefault(entity.holder, set()).add(entity.policy_id)

    def _indexes(self) -> Dict[str, Any]:
        return {"by_holder": self._by_holder}

    def _restore_indexes(self, indexes: Dict[str, Any]):
        self._by_holder = indexes["by_holder"]

    def get_ids_by_holder(self, holder: str) -> List[int]:
        """Policy ids created by a holder, oldest first."""
        self._load_all()
        return sorted(self._by_holder.get(holder, set()))

