"""
Tests for the key-value backends and backend selection.
"""
import json
from unittest.mock import MagicMock

import pytest

from casedesk.ai.config import ConfigurationStore
from casedesk.ai.interfaces import ConfigurationError, ProviderIdentity
from casedesk.data import InMemoryKeyValueStore, JsonFileKeyValueStore, SupabaseKeyValueStore
from casedesk.deps import get_key_value_store
from casedesk.settings import Settings


class TestInMemoryStore:

    def test_set_get_delete(self):
        store = InMemoryKeyValueStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        assert store.delete("k") is True
        assert store.delete("k") is False

    def test_stats(self):
        store = InMemoryKeyValueStore({"a": "1"})
        store.get("a")
        store.get("b")
        stats = store.get_stats()
        assert (stats["hits"], stats["misses"], stats["entries"]) == (1, 1, 1)


class TestJsonFileStore:

    def test_values_survive_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        JsonFileKeyValueStore(str(path)).set("multi-ai-config", "{\"providers\": []}")

        assert JsonFileKeyValueStore(str(path)).get("multi-ai-config") == "{\"providers\": []}"
        assert json.loads(path.read_text(encoding="utf-8")) == {"multi-ai-config": "{\"providers\": []}"}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")
        assert JsonFileKeyValueStore(str(path)).get("anything") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path / "config.json"))
        store.set("a", "1")
        store.set("b", "2")
        assert [p.name for p in tmp_path.iterdir()] == ["config.json"]

    def test_configuration_store_on_file_backend(self, tmp_path, openai_config):
        path = str(tmp_path / "config.json")
        ConfigurationStore(JsonFileKeyValueStore(path)).upsert_provider(openai_config)

        reloaded = ConfigurationStore(JsonFileKeyValueStore(path)).load()
        assert reloaded.find(ProviderIdentity.OPENAI).api_key == openai_config.api_key


class TestSupabaseStore:

    def _client(self, rows=None):
        client = MagicMock()
        query = client.table.return_value
        for method in ("select", "eq", "limit", "upsert", "delete"):
            getattr(query, method).return_value = query
        query.execute.return_value = MagicMock(data=rows or [])
        return client, query

    def test_get_scopes_by_client(self):
        client, query = self._client(rows=[{"value": "stored"}])
        store = SupabaseKeyValueStore("", "", client_id="team-a", client=client)

        assert store.get("multi-ai-config") == "stored"
        client.table.assert_called_with("app_settings")
        query.eq.assert_any_call("client_id", "team-a")
        query.eq.assert_any_call("key", "multi-ai-config")

    def test_set_upserts_on_client_and_key(self):
        client, query = self._client()
        store = SupabaseKeyValueStore("", "", client_id="team-a", table="settings", client=client)

        store.set("multi-ai-config", "{}")

        row = query.upsert.call_args.args[0]
        assert row["client_id"] == "team-a"
        assert row["value"] == "{}"
        assert query.upsert.call_args.kwargs["on_conflict"] == "client_id,key"

    def test_errors_propagate(self):
        client, query = self._client()
        query.execute.side_effect = RuntimeError("network down")
        store = SupabaseKeyValueStore("", "", client=client)

        with pytest.raises(RuntimeError):
            store.get("multi-ai-config")

    def test_missing_credentials_rejected(self):
        with pytest.raises(ValueError):
            SupabaseKeyValueStore("", "")


class TestBackendSelection:

    def test_memory_backend(self):
        assert isinstance(get_key_value_store(Settings(config_backend="memory")), InMemoryKeyValueStore)

    def test_file_backend(self, tmp_path):
        settings = Settings(config_backend="file", config_file_path=str(tmp_path / "c.json"))
        assert isinstance(get_key_value_store(settings), JsonFileKeyValueStore)

    def test_supabase_backend_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            get_key_value_store(Settings(config_backend="supabase", supabase_url="", supabase_service_key=""))
