"""
Data models for inventory tracking and part synchronization
Simple dataclasses for clean data handling
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Set
from datetime import datetime
import uuid


def now_iso() -> str:
    return datetime.now().isoformat()


def temporary_part_id() -> str:
    """Placeholder identifier for a part the remote store has not seen yet"""
    return f"tmp-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class CatalogEntry:
    """One product of the fixed catalog"""
    id: int
    name: str
    icon: str


@dataclass
class Part:
    """Represents a single part owned by a product"""
    id: str
    name: str
    part_no: str
    quantity: int = 0
    vendor: str = ""
    is_new: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict) -> "Part":
        """Build a part from a flat remote-store record"""
        return cls(
            id=str(record["id"]),
            name=record.get("part_name") or "",
            part_no=record.get("part_number") or "",
            quantity=record.get("quantity") or 0,
            vendor=record.get("vendor") or "",
            is_new=bool(record.get("is_new") or False),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

    def to_record(self, product_name: str) -> Dict:
        """Flat record payload without the identifier"""
        return {
            "product_name": product_name,
            "part_name": self.name,
            "part_number": self.part_no,
            "quantity": self.quantity,
            "vendor": self.vendor,
            "is_new": self.is_new,
        }

    def copy(self, **changes) -> "Part":
        return replace(self, **changes)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "partNo": self.part_no,
            "quantity": self.quantity,
            "vendor": self.vendor,
            "isNew": self.is_new,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Product:
    """A catalog product together with its current parts"""
    id: int
    name: str
    icon: str = ""
    parts: List[Part] = field(default_factory=list)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "parts": [p.to_dict() for p in self.parts],
        }


@dataclass(frozen=True)
class User:
    """Current user as supplied by the session layer"""
    id: str
    name: str
    email: str
    role: str = "staff"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class StockCategory(str, Enum):
    ALL = "all"
    IN_STOCK = "inStock"
    OUT_OF_STOCK = "outOfStock"
    LOW_STOCK = "lowStock"
    INCOMING = "incoming"

    @classmethod
    def _missing_(cls, value):
        # Older clients send "incomingStock"
        if value == "incomingStock":
            return cls.INCOMING
        return None


@dataclass(frozen=True)
class PartQuery:
    """Free-text and stock category filter over a part collection"""
    text: str = ""
    stock_category: StockCategory = StockCategory.ALL


@dataclass
class PartDiff:
    """Operations needed to move a product's remote parts to a target list"""
    to_delete: Set[str] = field(default_factory=set)
    to_update: List[Part] = field(default_factory=list)
    to_insert: List[Part] = field(default_factory=list)

    @property
    def total_operations(self) -> int:
        return len(self.to_delete) + len(self.to_update) + len(self.to_insert)


@dataclass
class SyncResult:
    """Result of one reconciliation round"""
    product_name: str
    deleted: int = 0
    updated: int = 0
    inserted: int = 0
    error_messages: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    timestamp: str = field(default_factory=now_iso)
    status: str = "pending"

    def to_dict(self):
        return {
            "product_name": self.product_name,
            "deleted": self.deleted,
            "updated": self.updated,
            "inserted": self.inserted,
            "error_messages": self.error_messages,
            "duration_seconds": round(self.duration_seconds, 3),
            "timestamp": self.timestamp,
            "status": self.status
        }
