"""
Test configuration and fixtures for the inventory backend test suite.

Provides:
- FakeStore: in-memory remote store with call log and failure injection
- Coordinator / inventory service fixtures wired to the fake store
- Admin and staff users
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pytest

from database.sqlite_store import SqliteStore
from models.inventory_models import Part, User
from services.inventory_service import InventoryService
from services.sync_service import SyncCoordinator


class FakeStore:
    """In-memory stand-in for the remote part store."""

    def __init__(self):
        self.records: Dict[str, Dict] = {}
        self.users: Dict[str, Dict] = {}
        self.calls: List[tuple] = []
        self.fail_on = set()
        self._next_id = 1

    def _check(self, method: str):
        if method in self.fail_on:
            raise RuntimeError(f"{method} unavailable")

    def seed(self, product_name: str, part_name: str, part_number: str,
             quantity: int = 0, vendor: str = "Acme", record_id: str = None,
             is_new: bool = False) -> Dict:
        record_id = record_id or self._allocate_id()
        record = {
            "id": record_id,
            "product_name": product_name,
            "part_name": part_name,
            "part_number": part_number,
            "quantity": quantity,
            "vendor": vendor,
            "is_new": is_new,
            "created_at": datetime(2024, 1, 1).isoformat(),
            "updated_at": None,
        }
        self.records[record_id] = record
        return record

    def _allocate_id(self) -> str:
        # Never hands out an id twice, even after a delete
        record_id = f"rec-{self._next_id}"
        self._next_id += 1
        return record_id

    def list_all(self) -> List[Dict]:
        self.calls.append(("list_all",))
        self._check("list_all")
        return [dict(r) for r in self.records.values()]

    def list_by_product(self, product_name: str) -> List[Dict]:
        self.calls.append(("list_by_product", product_name))
        self._check("list_by_product")
        return [dict(r) for r in self.records.values() if r["product_name"] == product_name]

    def insert(self, record: Dict) -> Dict:
        self.calls.append(("insert", record.get("part_number")))
        self._check("insert")
        created = dict(record, id=self._allocate_id())
        self.records[created["id"]] = created
        return dict(created)

    def update(self, part_id: str, record: Dict) -> None:
        self.calls.append(("update", part_id))
        self._check("update")
        self.records[part_id].update(record)

    def delete_many(self, part_ids: Iterable[str]) -> None:
        ids = list(part_ids)
        self.calls.append(("delete_many", tuple(ids)))
        self._check("delete_many")
        for part_id in ids:
            self.records.pop(part_id, None)

    def get_user(self, email: str) -> Optional[Dict]:
        return self.users.get(email.lower().strip())

    def close(self) -> None:
        pass

    def mutating_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "update", "delete_many")]


def make_part(part_id: str, part_no: str, quantity: int = 0, name: str = None,
              vendor: str = "Acme", is_new: bool = False) -> Part:
    return Part(
        id=part_id,
        name=name or f"Part {part_no}",
        part_no=part_no,
        quantity=quantity,
        vendor=vendor,
        is_new=is_new,
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def coordinator(store):
    coord = SyncCoordinator(store, history_limit=10)
    coord.load()
    return coord


@pytest.fixture
def inventory(coordinator):
    return InventoryService(coordinator)


@pytest.fixture
def admin():
    return User(id="u1", name="Ada Admin", email="admin@example.com", role="admin")


@pytest.fixture
def staff():
    return User(id="u2", name="Sam Staff", email="staff@example.com", role="staff")


@pytest.fixture
def sqlite_store():
    db = SqliteStore(":memory:")
    yield db
    db.close()
