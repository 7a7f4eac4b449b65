"""
Local part store (SQLite implementation)
Same record layout as the remote Supabase table, for offline runs and tests
"""
import sqlite3
import logging
import uuid
from typing import Dict, Iterable, List, Optional
from datetime import datetime

logger = logging.getLogger(__name__)

RECORD_COLUMNS = (
    "product_name", "part_name", "part_number", "quantity",
    "vendor", "is_new", "created_at", "updated_at",
)


class SqliteStore:
    """Part records and users in a SQLite database"""

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self.conn = None
        self._init_database()

    def _init_database(self):
        """Create database schema if not exists"""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

        cursor = self.conn.cursor()

        # Flat part records, grouped by product_name
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                product_name TEXT NOT NULL,
                part_name TEXT NOT NULL,
                part_number TEXT NOT NULL,
                quantity INTEGER DEFAULT 0,
                vendor TEXT,
                is_new INTEGER DEFAULT 0,
                created_at TEXT,
                updated_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                role TEXT DEFAULT 'staff',
                created_at TEXT
            )
        """)

        self.conn.commit()
        logger.info(f"SQLite store initialized: {self.db_path}")

    def _row_to_record(self, row: sqlite3.Row) -> Dict:
        record = dict(row)
        record["is_new"] = bool(record["is_new"])
        return record

    def list_all(self) -> List[Dict]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM products ORDER BY created_at DESC, rowid DESC")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def list_by_product(self, product_name: str) -> List[Dict]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT * FROM products WHERE product_name = ? ORDER BY created_at, rowid",
            (product_name,)
        )
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def insert(self, record: Dict) -> Dict:
        """Insert a new record and assign its id"""
        row = {column: record.get(column) for column in RECORD_COLUMNS}
        row["id"] = str(uuid.uuid4())
        row["quantity"] = row["quantity"] or 0
        row["is_new"] = 1 if row["is_new"] else 0
        row["created_at"] = row["created_at"] or datetime.now().isoformat()

        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        try:
            self.conn.execute(
                f"INSERT INTO products ({columns}) VALUES ({placeholders})",
                tuple(row.values())
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

        row["is_new"] = bool(row["is_new"])
        return row

    def update(self, part_id: str, record: Dict) -> None:
        """Update the given fields of an existing record"""
        fields = {k: v for k, v in record.items() if k in RECORD_COLUMNS}
        if not fields:
            return
        if "is_new" in fields:
            fields["is_new"] = 1 if fields["is_new"] else 0

        assignments = ", ".join(f"{column} = ?" for column in fields)
        try:
            self.conn.execute(
                f"UPDATE products SET {assignments} WHERE id = ?",
                (*fields.values(), part_id)
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def delete_many(self, part_ids: Iterable[str]) -> None:
        ids = list(part_ids)
        if not ids:
            return
        placeholders = ", ".join("?" for _ in ids)
        try:
            self.conn.execute(f"DELETE FROM products WHERE id IN ({placeholders})", ids)
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
        logger.debug(f"Deleted {len(ids)} part records")

    def add_user(self, name: str, email: str, role: str = "staff") -> Dict:
        """Create a user profile (no credentials are stored here)"""
        user = {
            "id": str(uuid.uuid4()),
            "name": name.strip(),
            "email": email.lower().strip(),
            "role": role,
            "created_at": datetime.now().isoformat(),
        }
        self.conn.execute(
            "INSERT INTO users (id, name, email, role, created_at) VALUES (?, ?, ?, ?, ?)",
            tuple(user.values())
        )
        self.conn.commit()
        return user

    def get_user(self, email: str) -> Optional[Dict]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, email, role FROM users WHERE email = ?",
            (email.lower().strip(),)
        )
        row = cursor.fetchone()
        return dict(row) if row else None

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
