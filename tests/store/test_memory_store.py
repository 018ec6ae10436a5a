"""
Tests for the in-memory and JSON file row stores.
"""

import json
import pytest
from unittest.mock import patch

from cohortcraft.store import get_store
from cohortcraft.store.memory_store import MemoryStore, JsonFileStore
from cohortcraft.core.error_handler import StoreError, RecordNotFoundError, ConfigurationError

class TestMemoryStore:
    """
    Tests for MemoryStore.
    """

    def test_insert_assigns_id_and_timestamps(self, store, campaign):
        assert campaign["id"]
        assert campaign["created_at"]
        assert campaign["updated_at"] == campaign["created_at"]
        assert store.get("campaigns", campaign["id"]) == campaign

    def test_insert_validates_schema(self, store):
        with pytest.raises(StoreError) as excinfo:
            store.insert("campaigns", {"user_id": "user-1", "title": "No prompt"})

        assert excinfo.value.table == "campaigns"

        with pytest.raises(StoreError):
            store.insert("campaigns", {
                "user_id": "user-1", "title": "t", "prompt": "p",
                "primary_channel": "social", "content_type": "image",
                "unexpected_column": True
            })

    def test_unknown_table(self, store):
        with pytest.raises(StoreError):
            store.insert("users", {"id": "1"})

    def test_foreign_key_enforced(self, store):
        with pytest.raises(StoreError) as excinfo:
            store.insert("micro_cohorts", {
                "campaign_id": "missing",
                "title": "t",
                "description": "d",
                "demographics": "x"
            })

        assert "Foreign key" in excinfo.value.message

    def test_duplicate_id(self, store, campaign):
        row = {key: value for key, value in campaign.items() if key not in ("created_at", "updated_at")}

        with pytest.raises(StoreError):
            store.insert("campaigns", row)

    def test_insert_fills_nullable_columns(self, store, cohort):
        creative = store.insert("campaign_creatives", {
            "cohort_id": cohort["id"],
            "headline": "Rain-ready getaways",
            "description": "Cozy stays",
            "cta": "Book now"
        })

        assert creative["image_url"] is None
        assert creative["image_prompt"] is None
        assert store.get("campaign_creatives", creative["id"])["image_url"] is None

        brand = store.insert("brand_guidelines", {"user_id": "user-9", "brand_name": "B", "brand_tone": "Calm"})
        assert brand["logo_url"] is None
        assert "status" not in store.insert("campaigns", {
            "user_id": "user-9", "title": "t", "prompt": "p",
            "primary_channel": "social", "content_type": "image"
        })

    def test_rows_are_copies(self, store, campaign):
        campaign["title"] = "Changed outside the store"

        assert store.get("campaigns", campaign["id"])["title"] == "Monsoon getaways"

    def test_select_filters_and_orders(self, store):
        for index, created_at in enumerate(["2024-01-02T00:00:00+00:00", "2024-01-01T00:00:00+00:00", "2024-01-03T00:00:00+00:00"]):
            store.insert("campaigns", {
                "user_id": "user-1" if index < 2 else "user-2",
                "title": f"Campaign {index}",
                "prompt": "brief",
                "primary_channel": "social",
                "content_type": "image",
                "created_at": created_at
            })

        ascending = store.select("campaigns", user_id="user-1")
        descending = store.select("campaigns", order_by="-created_at", user_id="user-1")

        assert [row["title"] for row in ascending] == ["Campaign 1", "Campaign 0"]
        assert [row["title"] for row in descending] == ["Campaign 0", "Campaign 1"]
        assert store.find_one("campaigns", user_id="user-2")["title"] == "Campaign 2"
        assert store.find_one("campaigns", user_id="nobody") is None

    def test_update(self, store, creative):
        updated = store.update("campaign_creatives", creative["id"], {"image_url": "https://img.example/1.png"})

        assert updated["image_url"] == "https://img.example/1.png"
        assert updated["headline"] == creative["headline"]
        assert updated["updated_at"] >= creative["updated_at"]

    def test_update_missing_row(self, store):
        with pytest.raises(RecordNotFoundError):
            store.update("campaigns", "missing", {"status": "active"})

    def test_update_validates_types(self, store, creative):
        with pytest.raises(StoreError):
            store.update("campaign_creatives", creative["id"], {"image_url": 42})

    def test_delete_cascades(self, store, campaign, cohort, creative):
        store.delete("campaigns", campaign["id"])

        assert store.select("micro_cohorts") == []
        assert store.select("campaign_creatives") == []
        with pytest.raises(RecordNotFoundError):
            store.get("campaign_creatives", creative["id"])

    def test_delete_missing_row(self, store):
        with pytest.raises(RecordNotFoundError):
            store.delete("campaigns", "missing")


class TestJsonFileStore:
    """
    Tests for JsonFileStore persistence.
    """

    def test_persists_between_instances(self, tmp_path):
        path = tmp_path / "data" / "store.json"
        first = JsonFileStore(str(path))
        row = first.insert("brand_guidelines", {
            "user_id": "user-1",
            "brand_name": "Monsoon Escapes",
            "brand_tone": "Warm"
        })

        assert path.exists()
        assert json.loads(path.read_text())["brand_guidelines"][0]["id"] == row["id"]

        second = JsonFileStore(str(path))
        assert second.get("brand_guidelines", row["id"])["brand_name"] == "Monsoon Escapes"

        second.delete("brand_guidelines", row["id"])
        assert JsonFileStore(str(path)).select("brand_guidelines") == []

    def test_write_replaces_file(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(str(path))
        store.insert("brand_guidelines", {"user_id": "user-1", "brand_name": "A", "brand_tone": "Warm"})

        with patch("cohortcraft.store.memory_store.save_json_file", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.insert("brand_guidelines", {"user_id": "user-2", "brand_name": "B", "brand_tone": "Calm"})

        rows = JsonFileStore(str(path)).select("brand_guidelines")
        assert [row["brand_name"] for row in rows] == ["A"]
        assert not (tmp_path / "store.json.tmp").exists()


class TestGetStore:
    """
    Tests for the store factory.
    """

    def test_memory_backend(self):
        assert isinstance(get_store("memory"), MemoryStore)

    def test_json_backend_from_config(self, tmp_path):
        from cohortcraft.core.config import set_config_value

        set_config_value("storage.path", str(tmp_path / "store.json"), save=False)
        store = get_store()

        assert isinstance(store, JsonFileStore)
        assert store.path == str(tmp_path / "store.json")

    def test_supabase_backend_requires_credentials(self):
        with pytest.raises(ConfigurationError):
            get_store("supabase")

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            get_store("postgres")
