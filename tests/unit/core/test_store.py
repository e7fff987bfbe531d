# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the key-value store backends.
"""

from __future__ import annotations

import pytest

from syndication.core.store import (
    INVESTMENTS_KEY,
    InMemoryStore,
    JsonFileStore,
    TenantScopedStore,
    create_store,
)


class TestInMemoryStore:
    def test_missing_key_loads_none(self):
        assert InMemoryStore().load("nothing") is None

    def test_loaded_values_do_not_alias_stored_state(self):
        """Mutating a loaded list leaves the stored snapshot untouched."""
        store = InMemoryStore()
        store.save(INVESTMENTS_KEY, [{"id": "a"}])

        loaded = store.load(INVESTMENTS_KEY)
        loaded.append({"id": "b"})

        assert store.load(INVESTMENTS_KEY) == [{"id": "a"}]

    def test_delete_and_exists(self):
        store = InMemoryStore()
        store.save("k", [1])
        assert store.exists("k")
        store.delete("k")
        assert not store.exists("k")
        store.delete("k")  # deleting twice is fine

    def test_keys_and_clear(self):
        store = InMemoryStore()
        store.save("b", [])
        store.save("a", [])
        assert store.keys() == ["a", "b"]
        store.clear()
        assert store.keys() == []


class TestJsonFileStore:
    def test_round_trip_through_disk(self, tmp_path):
        store = JsonFileStore(tmp_path / "data")
        store.save(INVESTMENTS_KEY, [{"id": "a", "amount": 1.5}])

        reopened = JsonFileStore(tmp_path / "data")
        assert reopened.load(INVESTMENTS_KEY) == [{"id": "a", "amount": 1.5}]
        assert (tmp_path / "data" / f"{INVESTMENTS_KEY}.json").exists()

    def test_no_temp_file_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.save("k", {"x": 1})
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_failed_write_keeps_previous_file(self, tmp_path):
        """A value that cannot be serialized leaves no temp file and the old data intact."""
        store = JsonFileStore(tmp_path)
        store.save("k", {"x": 1})

        with pytest.raises(TypeError):
            store.save("k", {"x": object()})

        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
        assert store.load("k") == {"x": 1}

    def test_tenant_prefix_maps_to_portable_file_name(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.save("acme:k", [1])
        assert (tmp_path / "acme__k.json").exists()
        assert store.load("acme:k") == [1]

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "white space"])
    def test_unsafe_keys_rejected(self, tmp_path, key):
        with pytest.raises(ValueError, match="Invalid storage key"):
            JsonFileStore(tmp_path).save(key, [])

    def test_delete_removes_file(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.save("k", [])
        store.delete("k")
        assert store.load("k") is None


class TestTenantScopedStore:
    def test_tenants_are_isolated(self):
        shared = InMemoryStore()
        acme = TenantScopedStore(shared, "acme")
        globex = TenantScopedStore(shared, "globex")

        acme.save(INVESTMENTS_KEY, [{"id": "a"}])

        assert globex.load(INVESTMENTS_KEY) is None
        assert shared.keys() == [f"acme:{INVESTMENTS_KEY}"]

    def test_empty_tenant_rejected(self):
        with pytest.raises(ValueError):
            TenantScopedStore(InMemoryStore(), "")


class TestCreateStore:
    def test_defaults_to_memory(self):
        assert isinstance(create_store(), InMemoryStore)

    def test_directory_selects_file_store(self, tmp_path):
        assert isinstance(create_store(tmp_path), JsonFileStore)

    def test_tenant_wraps_store(self, tmp_path):
        store = create_store(tmp_path, tenant_id="acme")
        assert isinstance(store, TenantScopedStore)
        assert isinstance(store.inner, JsonFileStore)
