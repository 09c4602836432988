"""
Supabase key-value store for settings shared across a client's devices.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .store_interface import KeyValueStore

logger = logging.getLogger(__name__)


class SupabaseKeyValueStore(KeyValueStore):
    """
    Settings rows in a Supabase table, scoped by client id.

    Expected table layout: ``client_id text, key text, value text,
    updated_at timestamptz`` with a unique constraint on ``(client_id, key)``.
    """

    def __init__(self, url: str, service_key: str, client_id: str = "default",
                 table: str = "app_settings", client=None):
        """
        Initialize the Supabase connection.

        Args:
            url: Supabase project URL
            service_key: Service role key
            client_id: Scope for every key read or written
            table: Settings table name
            client: Pre-built supabase Client (skips create_client)
        """
        if client is None:
            if not url or not service_key:
                raise ValueError("Missing SUPABASE_URL or SUPABASE_SERVICE_KEY")

            from supabase import create_client

            logger.info("🔄 Initializing SupabaseKeyValueStore...")
            client = create_client(url, service_key)

        self.client = client
        self.client_id = client_id
        self.table = table

    def get(self, key: str) -> Optional[str]:
        try:
            result = self.client.table(self.table)\
                .select("value")\
                .eq("client_id", self.client_id)\
                .eq("key", key)\
                .limit(1)\
                .execute()
            return result.data[0]["value"] if result.data else None
        except Exception as e:
            logger.error(f"❌ Failed to load setting '{key}' for client {self.client_id}: {e}")
            raise

    def set(self, key: str, value: str) -> None:
        try:
            self.client.table(self.table)\
                .upsert({
                    "client_id": self.client_id,
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now().isoformat()
                }, on_conflict="client_id,key")\
                .execute()
            logger.debug(f"✅ Setting '{key}' saved for client {self.client_id}")
        except Exception as e:
            logger.error(f"❌ Failed to save setting '{key}' for client {self.client_id}: {e}")
            raise

    def delete(self, key: str) -> bool:
        try:
            result = self.client.table(self.table)\
                .delete()\
                .eq("client_id", self.client_id)\
                .eq("key", key)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"❌ Failed to delete setting '{key}' for client {self.client_id}: {e}")
            raise

    def get_stats(self) -> Dict[str, Any]:
        return {
            "type": "supabase",
            "table": self.table,
            "client_id": self.client_id,
        }
