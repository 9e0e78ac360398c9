# mutualpool/storage/base.py
"""Base storage interface."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Dict, Any, Tuple
from pathlib import Path
import copy
import json
from datetime import datetime, date

from mutualpool.core.exceptions import RecordNotFoundError, StorageError
from mutualpool.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for datetime and date objects."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def read_json(filepath: Optional[Path]) -> Dict[str, Any]:
    """Load a JSON snapshot; a missing file is an empty snapshot."""
    if filepath is None or not filepath.exists():
        return {}
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load {filepath}: {e}")
        raise StorageError(str(e), str(filepath)) from e


def write_json(filepath: Path, data: Dict[str, Any]):
    """Write a JSON snapshot via a temp file so readers never see half a file."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, cls=JSONEncoder)
        tmp_path.replace(filepath)
    except OSError as e:
        logger.error(f"Failed to save {filepath}: {e}")
        raise StorageError(str(e), str(filepath)) from e


class BaseStore(ABC, Generic[T]):
    """Abstract base class for record stores keyed by integer id.

    Records are copied on the way in and on the way out, so a caller can
    never mutate stored state without going through ``save``.
    """

    kind: str = "Record"

    def __init__(self, data_dir: Optional[str], filename: str):
        self.data_dir = Path(data_dir) if data_dir else None
        self.filepath = self.data_dir / filename if self.data_dir else None
        self._cache: Dict[int, T] = {}
        self._loaded = False
        self._dirty = False

    @abstractmethod
    def _serialize(self, entity: T) -> Dict[str, Any]:
        """Serialize entity to dict."""
        pass

    @abstractmethod
    def _deserialize(self, data: Dict[str, Any]) -> T:
        """Deserialize dict to entity."""
        pass

    @abstractmethod
    def _get_id(self, entity: T) -> int:
        """Get entity ID."""
        pass

    @abstractmethod
    def _copy(self, entity: T) -> T:
        """Detached copy of an entity."""
        pass

    def _index(self, entity: T, previous: Optional[T]):
        """Hook for subclasses maintaining secondary indexes."""
        pass

    def _indexes(self) -> Dict[str, Any]:
        return {}

    def _restore_indexes(self, indexes: Dict[str, Any]):
        pass

    def _load_all(self) -> Dict[int, T]:
        """Load and deserialize all entities."""
        if not self._loaded:
            data = read_json(self.filepath)
            for key, value in data.items():
                entity = self._deserialize(value)
                self._cache[int(key)] = entity
                self._index(entity, None)
            self._loaded = True
        return self._cache

    def save(self, entity: T) -> T:
        """Save (insert or replace) an entity."""
        cache = self._load_all()
        entity_id = self._get_id(entity)
        stored = self._copy(entity)
        self._index(stored, cache.get(entity_id))
        cache[entity_id] = stored
        self._dirty = True
        logger.debug(f"Saved {self.kind.lower()}: {entity_id}")
        return self._copy(stored)

    def get(self, entity_id: int) -> T:
        """Get entity by ID."""
        entity = self._load_all().get(entity_id)
        if entity is None:
            raise RecordNotFoundError(self.kind, entity_id)
        return self._copy(entity)

    # ===================
    # Transaction support
    # ===================

    def checkpoint(self) -> Tuple[Dict[int, T], Dict[str, Any], bool]:
        """Capture state so a failed transaction can be undone."""
        cache = self._load_all()
        return dict(cache), copy.deepcopy(self._indexes()), self._dirty

    def restore(self, saved: Tuple[Dict[int, T], Dict[str, Any], bool]):
        cache, indexes, dirty = saved
        self._cache = dict(cache)
        self._restore_indexes(indexes)
        self._dirty = dirty

    def mark_dirty(self):
        self._dirty = True

    def flush(self):
        """Write pending changes to disk when persistence is enabled."""
        if self.filepath is None or not self._dirty:
            return
        data = {str(k): self._serialize(v) for k, v in sorted(self._cache.items())}
        write_json(self.filepath, data)
        self._dirty = False
