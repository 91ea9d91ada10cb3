from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from quizgen.core.config import get_settings

from . import quiz_helpers

router = APIRouter(tags=["health"])


def _ok_check(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": "ok"}
    if extra:
        payload.update(extra)
    return payload


def _failed_check(error: str) -> dict[str, str]:
    return {"status": "failed", "error": error}


def _check_llm_config() -> dict[str, Any]:
    settings = get_settings()
    if not settings.llm_api_key:
        return _failed_check("llm_api_key_missing")
    if not settings.llm_api_url:
        return _failed_check("llm_api_url_missing")
    return _ok_check({"model": settings.llm_model})


def _check_session_store() -> dict[str, Any]:
    return _ok_check({"active_sessions": quiz_helpers.get_session_service().active_sessions})


def _collect_checks() -> dict[str, dict[str, Any]]:
    return {
        "llm": _check_llm_config(),
        "sessions": _check_session_store(),
    }


def _all_checks_ok(checks: dict[str, dict[str, Any]]) -> bool:
    return all(check.get("status") == "ok" for check in checks.values())


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health")
async def health() -> JSONResponse:
    checks = _collect_checks()
    is_healthy = _all_checks_ok(checks)
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if is_healthy else "degraded",
            "checks": checks,
        },
    )
