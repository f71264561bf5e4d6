from datetime import timedelta

import pytest

from config.config import Config
from middlewares import RateLimitMiddleware


@pytest.fixture
def middleware(clock):
    config = Config(
        BOT_TOKEN="test",
        OPENAI_API_KEY=None,
        WEBAPP_URL=None,
        MAX_REQUESTS_PER_HOUR=3,
        MAX_REQUESTS_PER_MINUTE=2,
    )
    return RateLimitMiddleware(config, clock=clock)


def test_minute_limit(middleware, clock, now):
    assert middleware.check_rate_limit(1)
    assert middleware.check_rate_limit(1)
    assert not middleware.check_rate_limit(1)

    clock.now = now + timedelta(seconds=61)
    assert middleware.check_rate_limit(1)


def test_hour_limit(middleware, clock, now):
    for minute in range(3):
        clock.now = now + timedelta(minutes=minute * 2)
        assert middleware.check_rate_limit(1)

    clock.now = now + timedelta(minutes=10)
    assert not middleware.check_rate_limit(1)

    clock.now = now + timedelta(hours=1, minutes=1)
    assert middleware.check_rate_limit(1)


def test_users_are_limited_separately(middleware):
    assert middleware.check_rate_limit(1)
    assert middleware.check_rate_limit(1)
    assert not middleware.check_rate_limit(1)
    assert middleware.check_rate_limit(2)
