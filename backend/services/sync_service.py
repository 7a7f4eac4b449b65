import copy
import logging
import threading
import time
from collections import deque
from typing import Callable, Dict, Iterable, List, Optional, Union
from config import Config
from database.store import PartStore
from models.catalog import PRODUCT_CATALOG, empty_products, get_catalog_entry
from models.errors import SyncError
from models.inventory_models import Part, PartDiff, Product, SyncResult, now_iso
from services.diff_engine import compute_diff

logger = logging.getLogger(__name__)

# A new part list, or a function building it from the current parts
TargetParts = Union[List[Part], Callable[[List[Part]], Optional[List[Part]]]]


def group_records(records: Iterable[Dict], catalog=PRODUCT_CATALOG) -> List[Product]:
    """
    Group flat part records by product name into catalog products

    Every catalog product is present, with an empty parts list when it has no
    records. Records naming a product outside the catalog are ignored.
    """
    products = empty_products(catalog)
    by_name = {p.name: p for p in products}

    for record in records:
        product = by_name.get(record.get("product_name"))
        if product is None:
            logger.debug(f"Ignoring record {record.get('id')} for unknown product "
                         f"'{record.get('product_name')}'")
            continue
        product.parts.append(Part.from_record(record))

    return products


class InventoryState:
    """
    Locally materialized product catalog

    Holds the optimistic view shown to callers. Reads return copies so callers
    can build candidate part lists without touching the shared state.
    """

    def __init__(self, catalog=PRODUCT_CATALOG):
        self.catalog = catalog
        self._products = empty_products(catalog)
        self._lock = threading.RLock()

    def products(self) -> List[Product]:
        with self._lock:
            return copy.deepcopy(self._products)

    def get_product(self, product_id: int) -> Optional[Product]:
        with self._lock:
            product = next((p for p in self._products if p.id == product_id), None)
            return copy.deepcopy(product)

    def set_parts(self, product_id: int, parts: List[Part]):
        """Show parts as the product's state before remote confirmation"""
        with self._lock:
            for product in self._products:
                if product.id == product_id:
                    product.parts = copy.deepcopy(list(parts))
                    return
        raise KeyError(f"Unknown product id: {product_id}")

    def replace(self, products: List[Product]):
        """Replace the whole catalog (never merged)"""
        with self._lock:
            self._products = copy.deepcopy(products)


class SyncCoordinator:
    """
    Reconciles a product's remote part records with a target part list

    One round:
    1. Optimistic update of the local state
    2. Fetch the product's current remote records
    3. Diff remote records against the target list
    4. Apply delete -> update -> insert, stopping at the first failure
    5. Full re-fetch replacing the local catalog

    A failure raises SyncError and leaves the optimistic state in place; the
    next successful refresh brings local state back in line with the store.
    Rounds for the same product are serialized, and the new part list of a
    round is built under that serialization.
    """

    def __init__(self, store: PartStore, state: InventoryState = None,
                 history_limit: int = None):
        self.store = store
        self.state = state or InventoryState()
        self.catalog = self.state.catalog
        self.history = deque(maxlen=history_limit or Config.SYNC_HISTORY_LIMIT)
        self._round_locks: Dict[str, threading.Lock] = {}
        self._round_locks_guard = threading.Lock()
        self._refresh_lock = threading.Lock()
        # Target lists of rounds still applying operations, by product id
        self._pending: Dict[int, List[Part]] = {}
        logger.info("Sync coordinator initialized")

    def _round_lock(self, product_name: str) -> threading.Lock:
        with self._round_locks_guard:
            if product_name not in self._round_locks:
                self._round_locks[product_name] = threading.Lock()
            return self._round_locks[product_name]

    def _store_call(self, description: str, product_name: str, func, *args):
        try:
            return func(*args)
        except Exception as e:
            raise SyncError(f"{description} failed: {e}", product_name) from e

    # ================================================================
    # Refresh
    # ================================================================
    def refresh(self) -> List[Product]:
        """
        Re-fetch every record and replace the local catalog

        Fetch and replace happen under one lock, so a refresh never lands on
        top of a newer one. Products with a round still applying operations
        keep their optimistic parts.
        """
        with self._refresh_lock:
            logger.info("REFRESH: Fetching all part records...")
            records = self._store_call("Fetch all parts", None, self.store.list_all)

            products = group_records(records, self.catalog)
            with self._round_locks_guard:
                pending = dict(self._pending)
            for product in products:
                if product.id in pending:
                    product.parts = pending[product.id]

            self.state.replace(products)

        logger.info(f"REFRESH: Loaded {len(records)} parts across {len(products)} products")
        return self.state.products()

    def load(self) -> List[Product]:
        """Initial load; on failure every product starts with no parts"""
        try:
            return self.refresh()
        except SyncError as e:
            logger.error(f"REFRESH: Initial load failed, starting empty - {e}")
            self.state.replace(empty_products(self.catalog))
            return self.state.products()

    # ================================================================
    # Reconciliation round
    # ================================================================
    def apply(self, product_name: str, diff: PartDiff, result: SyncResult):
        """Apply diff operations in order: delete, update, insert"""
        if diff.to_delete:
            self._store_call("Delete parts", product_name,
                             self.store.delete_many, sorted(diff.to_delete))
            result.deleted = len(diff.to_delete)
            logger.debug(f"APPLY: Deleted {result.deleted} parts from {product_name}")

        for part in diff.to_update:
            record = part.to_record(product_name)
            record["is_new"] = False
            record["updated_at"] = now_iso()
            self._store_call(f"Update part {part.part_no}", product_name,
                             self.store.update, part.id, record)
            result.updated += 1

        for part in diff.to_insert:
            record = part.to_record(product_name)
            record["is_new"] = False
            record["created_at"] = part.created_at or now_iso()
            record["updated_at"] = now_iso()
            created = self._store_call(f"Insert part {part.part_no}", product_name,
                                       self.store.insert, record)
            result.inserted += 1
            logger.debug(f"APPLY: Inserted {part.part_no} as {created.get('id')}")

    def reconcile(self, product_id: int, target_parts: TargetParts) -> List[Product]:
        """
        Run one reconciliation round for a product

        target_parts is either the product's new part list or a function
        building it from the product's current parts. The function runs under
        the product's round lock, so it always sees the outcome of the previous
        round. It may raise to reject the change, or return None to leave the
        product as it is (no remote call is made).

        Returns the refreshed product catalog. Raises SyncError when any
        store call fails, KeyError for a product outside the catalog.
        """
        entry = get_catalog_entry(product_id, self.catalog)
        if entry is None:
            raise KeyError(f"Unknown product id: {product_id}")

        with self._round_lock(entry.name):
            if callable(target_parts):
                current = self.state.get_product(product_id).parts
                target = target_parts(current)
                if target is None:
                    return self.state.products()
            else:
                target = target_parts
            target = copy.deepcopy(list(target))

            start_time = time.time()
            result = SyncResult(product_name=entry.name)
            logger.info(f"SYNC STARTED: {entry.name} ({len(target)} target parts)")

            with self._round_locks_guard:
                self._pending[product_id] = target
            self.state.set_parts(product_id, target)

            try:
                try:
                    remote = self._store_call("Fetch product parts", entry.name,
                                              self.store.list_by_product, entry.name)
                    logger.info(f"FETCH: {len(remote)} remote parts for {entry.name}")

                    diff = compute_diff(remote, target)
                    logger.info(f"DIFF: delete={len(diff.to_delete)} update={len(diff.to_update)} "
                                f"insert={len(diff.to_insert)}")

                    self.apply(entry.name, diff, result)
                finally:
                    with self._round_locks_guard:
                        self._pending.pop(product_id, None)
                products = self.refresh()
            except SyncError as e:
                result.status = "failed"
                result.error_messages.append(str(e))
                result.duration_seconds = time.time() - start_time
                self.history.append(result)
                logger.error(f"SYNC FAILED: {entry.name} - {e}", exc_info=True)
                raise

            result.status = "completed"
            result.duration_seconds = time.time() - start_time
            self.history.append(result)
            logger.info(f"SYNC COMPLETED: {entry.name} | Deleted: {result.deleted} | "
                        f"Updated: {result.updated} | Inserted: {result.inserted} | "
                        f"Duration: {result.duration_seconds:.3f}s")
            return products

    def get_sync_history(self, limit: int = 10) -> List[Dict]:
        """Recent rounds, newest first"""
        recent = list(self.history)[::-1][:limit]
        return [r.to_dict() for r in recent]
