import os
import sys

import pytest

# 确保项目根目录在 sys.path 中
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from tokenauth import service as service_module
from tokenauth.keys import SigningKey
from tokenauth.logging_config import get_colorful_logger
from tokenauth.service import TokenService

SECRET = "unit-test-secret-that-is-at-least-32-bytes-long"
START_MS = 1_760_000_000_000


class FakeClock:
    """可控时钟，单位毫秒"""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture(scope="session")
def logger():
    """提供一个带彩色格式的测试级别 logger"""
    return get_colorful_logger("tests")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def key():
    """每个测试独立生成的随机密钥"""
    return SigningKey.generate()


@pytest.fixture
def service(clock):
    return TokenService({"secret": SECRET, "expiration_millis": 86_400_000}, clock=clock)


@pytest.fixture
def make_service(clock):
    """
    按需创建 TokenService 的工厂方法
    使用方式:
        make_service(secret="...", expiration_millis=1000)
        make_service(signing_key=key)
    """
    def _mk(signing_key=None, **config):
        config.setdefault("secret", SECRET)
        return TokenService(config, clock=clock, signing_key=signing_key)
    return _mk


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """隔离外部环境变量与默认服务单例"""
    for name in ("JWT_SECRET", "JWT_EXPIRATION_MS", "JWT_SHORT_SECRET_POLICY"):
        monkeypatch.delenv(name, raising=False)
    service_module.reset_token_service()
    yield
    service_module.reset_token_service()
