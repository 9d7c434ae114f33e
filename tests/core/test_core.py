"""Tests for settings parsing, JSON log formatting, and storage fault translation."""
import json
import logging
from unittest.mock import MagicMock

import pydantic
import pytest
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from eventmarketers.core.config import Settings
from eventmarketers.core.errors import TransientStorageError
from eventmarketers.core.logging import JsonFormatter
from eventmarketers.db.session import storage_call


def test_moderator_roles_are_upper_cased():
    config = Settings(moderator_roles="admin, subadmin ,")
    assert config.moderator_roles_set == {"ADMIN", "SUBADMIN"}


def test_settings_are_frozen():
    config = Settings()
    with pytest.raises(pydantic.ValidationError):
        config.sync_batch_limit = 1


def test_is_sqlite():
    assert Settings(database_url="sqlite:///tmp.db").is_sqlite is True
    assert Settings(database_url="postgresql+psycopg2://u:p@db/x").is_sqlite is False


def test_json_formatter_keeps_whitelisted_extras():
    record = logging.LogRecord("eventmarketers.test", logging.INFO, __file__, 1, "content_synced", None, None)
    record.content_id = "c1"
    record.projection_id = "tmpl_c1"
    record.password = "not-logged"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "content_synced"
    assert payload["level"] == "INFO"
    assert payload["content_id"] == "c1"
    assert payload["projection_id"] == "tmpl_c1"
    assert "password" not in payload


class _Repo:
    def __init__(self, db, exc=None):
        self.db = db
        self.exc = exc

    @storage_call
    def run(self):
        if self.exc:
            raise self.exc
        return "done"


class TestStorageCall:
    def test_passthrough(self):
        assert _Repo(MagicMock()).run() == "done"

    @pytest.mark.parametrize("exc", [
        OperationalError("SELECT 1", {}, Exception("could not connect to server")),
        PoolTimeoutError("QueuePool limit reached"),
    ])
    def test_connectivity_faults_become_transient(self, exc):
        db = MagicMock()
        with pytest.raises(TransientStorageError) as info:
            _Repo(db, exc).run()
        assert info.value.status_code == 503
        db.rollback.assert_called_once()

    def test_other_errors_propagate(self):
        with pytest.raises(KeyError):
            _Repo(MagicMock(), KeyError("x")).run()
