import logging
from typing import Dict, Iterable, List, Optional
from supabase import create_client
from config import Config

logger = logging.getLogger(__name__)


class SupabaseStore:
    """Client for the part records table in Supabase"""

    def __init__(self, client=None):
        self.client = client or create_client(Config.SUPABASE_URL, Config.SUPABASE_KEY)
        self.table = Config.PARTS_TABLE
        logger.info("Supabase client initialized")

    def list_all(self) -> List[Dict]:
        """Fetch every part record across all products"""
        result = self.client.table(self.table)\
            .select("*")\
            .order("created_at", desc=True)\
            .execute()

        return result.data or []

    def list_by_product(self, product_name: str) -> List[Dict]:
        """Fetch part records for a single product"""
        result = self.client.table(self.table)\
            .select("*")\
            .eq("product_name", product_name)\
            .execute()
        return result.data or []

    def insert(self, record: Dict) -> Dict:
        """Insert a new record; Supabase generates the id"""
        result = self.client.table(self.table)\
            .insert([record])\
            .execute()

        if not result.data:
            raise RuntimeError(f"Insert returned no row for part {record.get('part_number')}")
        return result.data[0]

    def update(self, part_id: str, record: Dict) -> None:
        self.client.table(self.table)\
            .update(record)\
            .eq("id", part_id)\
            .execute()

    def delete_many(self, part_ids: Iterable[str]) -> None:
        ids = list(part_ids)
        if not ids:
            return
        self.client.table(self.table)\
            .delete()\
            .in_("id", ids)\
            .execute()
        logger.debug(f"Deleted {len(ids)} part records")

    def get_user(self, email: str) -> Optional[Dict]:
        """Look up a user profile by email"""
        result = self.client.table(Config.USERS_TABLE)\
            .select("id, name, email, role")\
            .eq("email", email.lower().strip())\
            .limit(1)\
            .execute()

        rows = result.data or []
        return rows[0] if rows else None

    def close(self) -> None:
        """The supabase client talks plain HTTP and holds no connection to close"""
