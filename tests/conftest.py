"""
Shared test fixtures for the licensing SDK.

The remote licensing service is replaced by FakeRemoteClient, an in-memory
stand-in that records every call. Tests use real files under tmp_path for
the cache and the injectables path.
"""

from typing import Any, Dict, List, Optional

import pytest

from licensing_sdk.config import SDKConfig
from licensing_sdk.exceptions import clear_correlation_id
from licensing_sdk.schemas.credential_schema import Credential
from licensing_sdk.schemas.injectable_schema import Injectable
from licensing_sdk.schemas.license_check_schema import LicenseCheckResult
from licensing_sdk.utils.encryption_utils import encrypt
from licensing_sdk.utils.logger import reset_logging

TEST_SECRET = "s3cr3t-project-key"
TEST_LICENSE = "LIC-1234-5678-ABCD"


class FakeRemoteClient:
    """In-memory licensing service that records calls."""

    def __init__(
        self,
        is_valid: bool = True,
        is_paid: bool = True,
        domain_allowed: Optional[bool] = None,
        injectables: Optional[List[Injectable]] = None,
        check_error: Optional[Exception] = None,
        list_error: Optional[Exception] = None,
    ):
        self.is_valid = is_valid
        self.is_paid = is_paid
        self.domain_allowed = domain_allowed
        self.injectables = injectables or []
        self.check_error = check_error
        self.list_error = list_error
        self.calls: List[Dict[str, Any]] = []

    def check_license(
        self, credential: Credential, action: str, domain: Optional[str] = None
    ) -> LicenseCheckResult:
        self.calls.append(
            {"method": "check_license", "credential": credential, "action": action, "domain": domain}
        )
        if self.check_error is not None:
            raise self.check_error
        return LicenseCheckResult(
            is_valid=self.is_valid,
            is_paid=self.is_paid,
            domain_allowed=self.domain_allowed,
            raw_response={"valid": self.is_valid, "paid": self.is_paid, "plan": "pro"},
        )

    def list_injectables(self, credential: Credential) -> List[Injectable]:
        self.calls.append({"method": "list_injectables", "credential": credential})
        if self.list_error is not None:
            raise self.list_error
        return list(self.injectables)

    def call_count(self, method: str) -> int:
        return sum(1 for call in self.calls if call["method"] == method)


@pytest.fixture(autouse=True)
def isolate_sdk_state():
    """Reset the module-level logger and correlation ID between tests."""
    reset_logging()
    clear_correlation_id()
    yield
    reset_logging()
    clear_correlation_id()


@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def license_key() -> str:
    return TEST_LICENSE


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def injectables_dir(tmp_path):
    return tmp_path / "injectables"


@pytest.fixture
def make_config(cache_dir, injectables_dir):
    """Factory for configs rooted in the test's tmp_path."""

    def _make(**overrides) -> SDKConfig:
        options = {
            "base_url": "https://licensing.test",
            "license": TEST_LICENSE,
            "secret": TEST_SECRET,
            "cache_path": str(cache_dir),
            "injectables_path": str(injectables_dir),
            "invalid_behavior": "silent",
        }
        options.update(overrides)
        return SDKConfig(**options)

    return _make


@pytest.fixture
def make_injectable():
    """Factory for injectables encrypted with the test secret."""

    def _make(
        slug: str,
        content: str = "payload",
        mode: str = "replace",
        target_path: str = "",
        type: str = "snippet",
        secret: str = TEST_SECRET,
    ) -> Injectable:
        return Injectable(
            slug=slug,
            mode=mode,
            type=type,
            target_path=target_path,
            encrypted_content=encrypt(content, secret),
        )

    return _make


@pytest.fixture
def make_client():
    """Factory for FakeRemoteClient instances."""
    return FakeRemoteClient
