"""
Remote store surface consumed by the sync coordinator
Any call may raise; the coordinator treats every failure as fatal to the round.
"""
import logging
from typing import Dict, Iterable, List, Optional, Protocol
from config import Config

logger = logging.getLogger(__name__)


class PartStore(Protocol):
    """Flat collection of part records keyed by id and grouped by product_name"""

    def list_all(self) -> List[Dict]:
        ...

    def list_by_product(self, product_name: str) -> List[Dict]:
        ...

    def insert(self, record: Dict) -> Dict:
        """Persist a record without id; returns it with the assigned id"""
        ...

    def update(self, part_id: str, record: Dict) -> None:
        ...

    def delete_many(self, part_ids: Iterable[str]) -> None:
        ...

    def get_user(self, email: str) -> Optional[Dict]:
        ...

    def close(self) -> None:
        ...


def create_store() -> PartStore:
    """Build the store selected by Config.STORE_BACKEND"""
    if Config.STORE_BACKEND == "sqlite":
        from database.sqlite_store import SqliteStore
        return SqliteStore(Config.SQLITE_DB_PATH)

    from database.supabase_client import SupabaseStore
    return SupabaseStore()
