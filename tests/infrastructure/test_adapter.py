"""Tests for VariableStoreAdapter — sub-key reads and merge writes."""

from __future__ import annotations

from typing import Any

import pytest

from tests.conftest import seed
from varsync.domain.scopes import ScopeKey
from varsync.errors import StoreReadError, StoreWriteError
from varsync.infrastructure.adapter import VariableStoreAdapter
from varsync.infrastructure.hosts import MemoryVariableHost


class _BrokenHost:
    def __init__(self, *, fail_reads: bool = True) -> None:
        self.fail_reads = fail_reads

    def get_variables(self, scope: ScopeKey) -> dict[str, Any]:
        if self.fail_reads:
            msg = "host offline"
            raise ConnectionError(msg)
        return {}

    def replace_variables(self, scope: ScopeKey, variables: Any) -> None:
        msg = "disk full"
        raise OSError(msg)


class TestRead:
    def test_missing_key_reads_empty(self, adapter: VariableStoreAdapter, chat_scope: ScopeKey) -> None:
        assert adapter.read(chat_scope) == {}

    def test_reads_sub_key_only(
        self, host: MemoryVariableHost, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        host.replace_variables(chat_scope, {"stat_data": {"affection": 3}, "other": 1})
        assert adapter.read(chat_scope) == {"affection": 3}

    def test_read_is_a_snapshot(
        self, host: MemoryVariableHost, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        seed(host, chat_scope, {"nested": {"a": 1}})
        snapshot = adapter.read(chat_scope)
        snapshot["nested"]["a"] = 2
        assert adapter.read(chat_scope) == {"nested": {"a": 1}}

    def test_non_mapping_content_returned_as_is(
        self, host: MemoryVariableHost, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        seed(host, chat_scope, "garbage")
        assert adapter.read(chat_scope) == "garbage"

    def test_dotted_key(self, host: MemoryVariableHost, chat_scope: ScopeKey) -> None:
        host.replace_variables(chat_scope, {"cards": {"kinako": {"affection": 9}}})
        assert VariableStoreAdapter(host, key="cards.kinako").read(chat_scope) == {"affection": 9}

    def test_host_failure_wrapped(self, chat_scope: ScopeKey) -> None:
        adapter = VariableStoreAdapter(_BrokenHost())
        with pytest.raises(StoreReadError, match="host offline") as exc_info:
            adapter.read(chat_scope)
        assert exc_info.value.scope == chat_scope


class TestWrite:
    def test_preserves_sibling_keys(
        self, host: MemoryVariableHost, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        host.replace_variables(chat_scope, {"stat_data": {"old": 1}, "other_script": {"x": 1}})
        adapter.write(chat_scope, {"affection": 5})
        assert host.get_variables(chat_scope) == {
            "stat_data": {"affection": 5},
            "other_script": {"x": 1},
        }

    def test_replaces_whole_sub_key(
        self, host: MemoryVariableHost, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        seed(host, chat_scope, {"a": 1, "b": 2})
        adapter.write(chat_scope, {"a": 3})
        assert adapter.read(chat_scope) == {"a": 3}

    def test_dotted_key_creates_parents(self, host: MemoryVariableHost, chat_scope: ScopeKey) -> None:
        VariableStoreAdapter(host, key="cards.kinako").write(chat_scope, {"affection": 1})
        assert host.get_variables(chat_scope) == {"cards": {"kinako": {"affection": 1}}}

    def test_written_blob_is_copied(
        self, adapter: VariableStoreAdapter, chat_scope: ScopeKey
    ) -> None:
        blob = {"nested": {"a": 1}}
        adapter.write(chat_scope, blob)
        blob["nested"]["a"] = 2
        assert adapter.read(chat_scope) == {"nested": {"a": 1}}

    def test_host_failure_wrapped(self, chat_scope: ScopeKey) -> None:
        adapter = VariableStoreAdapter(_BrokenHost(fail_reads=False))
        with pytest.raises(StoreWriteError, match="disk full"):
            adapter.write(chat_scope, {"a": 1})

    def test_empty_key_rejected(self, host: MemoryVariableHost) -> None:
        with pytest.raises(ValueError):
            VariableStoreAdapter(host, key="")
