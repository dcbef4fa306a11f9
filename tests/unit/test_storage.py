"""Tests for storage interface."""

import json
from unittest.mock import Mock

import pytest
from src.storage.storage_interface import LocalDataStore, S3DataStore, get_storage


def test_local_storage_set_get(tmp_path):
    """Test basic set and get operations."""
    store = LocalDataStore(base_path=str(tmp_path))

    document = {"players": [{"slug": "TenZ", "team": "KRÜ Esports"}], "count": 1}
    store.set("vctPlayers/current", document)

    assert store.get("vctPlayers/current") == document
    assert (tmp_path / "vctPlayers" / "current.json").exists()


def test_local_storage_missing_key(tmp_path):
    """Missing documents read as None."""
    store = LocalDataStore(base_path=str(tmp_path))

    assert store.get("earnings/teams") is None
    assert not store.exists("earnings/teams")


def test_local_storage_replaces_document(tmp_path):
    """Set replaces the whole document, it never merges."""
    store = LocalDataStore(base_path=str(tmp_path))

    store.set("earnings/teams", {"data": [1, 2], "count": 2, "extra": True})
    store.set("earnings/teams", {"data": [3], "count": 1})

    assert store.get("earnings/teams") == {"data": [3], "count": 1}
    assert store.exists("earnings/teams")
    assert not list(tmp_path.rglob("*.tmp"))


def test_get_storage_factory(tmp_path, monkeypatch):
    """Test storage factory function."""
    monkeypatch.setenv("DATA_PATH", str(tmp_path))
    store = get_storage("local")
    assert isinstance(store, LocalDataStore)
    assert store.base_path == tmp_path


def test_get_storage_s3_requires_bucket(monkeypatch):
    monkeypatch.delenv("S3_BUCKET", raising=False)
    with pytest.raises(ValueError):
        get_storage("s3")


def test_get_storage_unknown_type():
    with pytest.raises(ValueError):
        get_storage("ftp")


class TestS3DataStore:
    """S3 backend with a mocked boto3 client"""

    @pytest.fixture
    def store(self):
        store = S3DataStore(bucket="test-bucket")
        store._client = Mock()
        return store

    def test_set_writes_json_object(self, store):
        store.set("earnings/players", {"data": [], "count": 0})

        kwargs = store.client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket"
        assert kwargs["Key"] == "earnings/players.json"
        assert json.loads(kwargs["Body"]) == {"data": [], "count": 0}

    def test_get_reads_json_object(self, store):
        body = Mock()
        body.read.return_value = b'{"count": 3}'
        store.client.get_object.return_value = {"Body": body}

        assert store.get("earnings/teams") == {"count": 3}

    def test_get_missing_object_returns_none(self, store):
        error = Exception("Not Found")
        error.response = {"Error": {"Code": "404"}}
        store.client.head_object.side_effect = error

        assert store.get("vctPlayers/current") is None
        store.client.get_object.assert_not_called()

    def test_exists_reraises_other_errors(self, store):
        error = Exception("Access Denied")
        error.response = {"Error": {"Code": "403"}}
        store.client.head_object.side_effect = error

        with pytest.raises(IOError):
            store.exists("vctPlayers/current")

    def test_write_failure_raises_ioerror(self, store):
        store.client.put_object.side_effect = Exception("boom")

        with pytest.raises(IOError):
            store.set("earnings/teams", {})
