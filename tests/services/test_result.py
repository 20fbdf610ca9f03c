"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from varsync.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success(self) -> None:
        result = ServiceResult(ok=True, op="show", data={"state": {}})
        assert result.error is None
        assert result.warnings == []

    def test_failure_carries_detail(self) -> None:
        result = ServiceResult.failure("set", "VALIDATION_FAILED", "bad", errors=[{"path": "a"}])
        assert not result.ok
        assert result.error == ServiceError(
            code="VALIDATION_FAILED", message="bad", detail={"errors": [{"path": "a"}]}
        )

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="show")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_dump(self) -> None:
        result = ServiceResult.failure("show", "STORE_ERROR", "offline", scope="chat")
        dumped = result.model_dump(mode="json")
        assert dumped["error"] == {"code": "STORE_ERROR", "message": "offline", "detail": {"scope": "chat"}}
