from unittest.mock import MagicMock, patch

import pytest
from fastapi import Depends, FastAPI, Response
from fastapi.testclient import TestClient

from src.api.middleware.logging_middleware import LoggingMiddleware
from src.api.middleware.rate_limit_middleware import RateLimiter, get_rate_limit_config
from src.config.constants import RateLimitScope
from src.config.settings import Settings
from src.dependencies import get_rate_limit_repository
from src.exceptions import setup_exception_handlers
from src.repositories import RateLimitRepository, RateLimitResult, RepositoryError


@pytest.fixture
def enabled_settings():
    settings = Settings(RATE_LIMIT_ENABLED=True, API_RATE_LIMIT=5, API_RATE_WINDOW_SECONDS=60)
    with patch("src.api.middleware.rate_limit_middleware.get_settings", return_value=settings):
        yield settings


@pytest.fixture
def rate_limit_repo():
    return MagicMock(spec=RateLimitRepository)


@pytest.fixture
def limited_client(enabled_settings, rate_limit_repo):
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/limited", dependencies=[Depends(RateLimiter(RateLimitScope.API))])
    async def limited():
        return {"ok": True}

    app.dependency_overrides[get_rate_limit_repository] = lambda: rate_limit_repo
    return TestClient(app)


@pytest.fixture
def raw_response_client(enabled_settings, rate_limit_repo):
    app = FastAPI()
    app.middleware("http")(LoggingMiddleware())

    @app.get("/raw", dependencies=[Depends(RateLimiter(RateLimitScope.API))])
    async def raw():
        return Response(content=b"bytes", media_type="application/octet-stream")

    app.dependency_overrides[get_rate_limit_repository] = lambda: rate_limit_repo
    return TestClient(app)


def result(allowed, count, retry_after=None):
    return RateLimitResult(
        allowed=allowed,
        current_count=count,
        limit=5,
        remaining=max(0, 5 - count),
        reset_time=1_200_060,
        retry_after_seconds=retry_after,
    )


def test_allowed_request_gets_headers(limited_client, rate_limit_repo):
    rate_limit_repo.check_rate_limit.return_value = result(True, 2)

    response = limited_client.get("/limited", headers={"X-Forwarded-For": "198.51.100.9, 10.0.0.1"})

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "3"
    scope, identifier, config = rate_limit_repo.check_rate_limit.await_args.args
    assert scope == RateLimitScope.API
    assert identifier == "198.51.100.9"
    assert (config.limit, config.window_seconds) == (5, 60)


def test_headers_reach_routes_returning_a_response(raw_response_client, rate_limit_repo):
    rate_limit_repo.check_rate_limit.return_value = result(True, 4)

    response = raw_response_client.get("/raw")

    assert response.status_code == 200
    assert response.content == b"bytes"
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "1"


def test_blocked_request(limited_client, rate_limit_repo):
    rate_limit_repo.check_rate_limit.return_value = result(False, 6, retry_after=30)

    response = limited_client.get("/limited")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "30"
    assert response.headers["X-RateLimit-Remaining"] == "0"
    body = response.json()
    assert body["status"] == "error"
    assert body["code"] == "RATE_LIMIT_EXCEEDED"
    assert body["error"] == "Too many requests, please try again later."


def test_redis_failure_lets_request_through(limited_client, rate_limit_repo):
    rate_limit_repo.check_rate_limit.side_effect = RepositoryError("redis down")

    response = limited_client.get("/limited")

    assert response.status_code == 200
    assert "X-RateLimit-Limit" not in response.headers


def test_no_redis_no_limit(enabled_settings):
    app = FastAPI()

    @app.get("/limited", dependencies=[Depends(RateLimiter(RateLimitScope.GLOBAL))])
    async def limited():
        return {"ok": True}

    app.dependency_overrides[get_rate_limit_repository] = lambda: None

    assert TestClient(app).get("/limited").status_code == 200


def test_scope_configuration():
    settings = Settings(GLOBAL_RATE_LIMIT=100, GLOBAL_RATE_WINDOW_SECONDS=900,
                        API_RATE_LIMIT=30, API_RATE_WINDOW_SECONDS=60)

    assert get_rate_limit_config(RateLimitScope.GLOBAL, settings).limit == 100
    assert get_rate_limit_config(RateLimitScope.API, settings).window_seconds == 60
