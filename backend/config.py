import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Remote store (Supabase)
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")
    PARTS_TABLE = os.getenv("PARTS_TABLE", "products")
    USERS_TABLE = os.getenv("USERS_TABLE", "users")

    # "supabase" or "sqlite" (local/offline)
    STORE_BACKEND = os.getenv("STORE_BACKEND", "supabase")
    SQLITE_DB_PATH = os.getenv("SQLITE_DB_PATH", "./inventory.db")

    # API Server
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Sync
    SYNC_HISTORY_LIMIT = int(os.getenv("SYNC_HISTORY_LIMIT", "50"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @staticmethod
    def validate():
        """Ensure required settings are present for the selected store"""
        missing = []
        if Config.STORE_BACKEND not in ("supabase", "sqlite"):
            raise EnvironmentError(f"Unknown STORE_BACKEND: '{Config.STORE_BACKEND}'")

        if Config.STORE_BACKEND == "supabase":
            if not Config.SUPABASE_URL:
                missing.append("SUPABASE_URL")
            if not Config.SUPABASE_KEY:
                missing.append("SUPABASE_KEY")

        if missing:
            raise EnvironmentError(f"Missing required environment variables: {', '.join(missing)}")

        return True
