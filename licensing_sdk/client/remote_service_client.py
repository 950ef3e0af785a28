"""
HTTP client for the remote licensing service.

Thin boundary around ``requests``: one synchronous call per operation, a
single timeout, no retries. Transport and HTTP failures are mapped onto the
SDK's remote error kinds:

    network failure / timeout       -> ApiUnreachableError
    429                             -> RateLimitedError
    401, 403 and other error status -> ApiRejectedError
    undecodable or unexpected body  -> MalformedResponseError
"""

from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from ..config import SDKConfig
from ..constants import ApiPath, CredentialKind
from ..context.operation_context import operation
from ..exceptions import (
    ApiRejectedError,
    ApiUnreachableError,
    ErrorCode,
    MalformedResponseError,
    RateLimitedError,
)
from ..schemas.credential_schema import Credential
from ..schemas.injectable_schema import Injectable
from ..schemas.license_check_schema import LicenseCheckResult
from ..utils.logger import get_logger

USER_AGENT = "licensing-sdk-python/1.0"


def _first_bool(payload: Dict[str, Any], *keys: str) -> Optional[bool]:
    for key in keys:
        if key in payload and payload[key] is not None:
            value = payload[key]
            if isinstance(value, bool):
                return value
            if isinstance(value, (int, str)):
                return str(value).strip().lower() in ("1", "true", "yes", "paid", "valid")
    return None


class RemoteServiceClient:
    """
    Client for the license validation and injectable listing endpoints.

    Any object exposing ``check_license`` and ``list_injectables`` with the
    same signatures can stand in for this class in the orchestrator.
    """

    def __init__(self, config: SDKConfig, session: Optional[requests.Session] = None):
        """
        Args:
            config: SDK configuration (base URL, timeout, page size)
            session: Optional preconfigured session (proxies, certificates)
        """
        self.config = config
        self.base_url = config.base_url
        self.timeout = config.timeout_seconds
        self.session = session or requests.Session()
        self.logger = get_logger()

    def _get_headers(self, credential: Credential) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if credential.kind == CredentialKind.API_KEY:
            headers["Authorization"] = f"Bearer {credential.value}"
        else:
            headers["X-License-Key"] = credential.value
        return headers

    def _request(
        self,
        method: str,
        path: str,
        credential: Credential,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._get_headers(credential),
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise ApiUnreachableError(
                f"Licensing service timed out after {self.config.timeout} ms",
                endpoint=path,
                error_code=ErrorCode.TIMEOUT_ERROR,
                cause=e,
            )
        except requests.RequestException as e:
            raise ApiUnreachableError(
                f"Licensing service unreachable: {e}", endpoint=path, cause=e
            )

        status = response.status_code
        if status == 429:
            raise RateLimitedError(
                endpoint=path, retry_after=response.headers.get("Retry-After")
            )
        if status in (401, 403):
            raise ApiRejectedError(
                "Licensing service rejected the credential", http_status=status, endpoint=path
            )
        if status >= 400:
            raise ApiRejectedError(
                f"Licensing service returned HTTP {status}", http_status=status, endpoint=path
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Licensing service response is not JSON", endpoint=path, cause=e
            )

    @operation(name="remote.check_license")
    def check_license(
        self, credential: Credential, action: str, domain: Optional[str] = None
    ) -> LicenseCheckResult:
        """
        Confirm license validity and payment status in one round trip.

        Args:
            credential: License key or API key
            action: Action tag recorded by the service
            domain: Domain reported for domain-locked projects

        Returns:
            LicenseCheckResult with the raw response attached
        """
        body: Dict[str, Any] = {credential.kind.value: credential.value, "action": action}
        if domain:
            body["domain"] = domain

        payload = self._request("POST", ApiPath.LICENSE_VALIDATE, credential, json_body=body)
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                "License check response must be an object", endpoint=ApiPath.LICENSE_VALIDATE
            )

        data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        is_valid = _first_bool(data, "is_valid", "valid")
        if is_valid is None:
            raise MalformedResponseError(
                "License check response has no validity flag", endpoint=ApiPath.LICENSE_VALIDATE
            )
        is_paid = _first_bool(data, "is_paid", "paid")

        result = LicenseCheckResult(
            is_valid=is_valid,
            # Services that do not bill report no payment flag
            is_paid=True if is_paid is None else is_paid,
            domain_allowed=_first_bool(data, "domain_allowed"),
            raw_response=payload,
        )
        self.logger.info(
            "License checked",
            extra={
                "credential": str(credential),
                "action": action,
                "is_valid": result.is_valid,
                "is_paid": result.is_paid,
            },
        )
        return result

    @operation(name="remote.list_injectables")
    def list_injectables(self, credential: Credential) -> List[Injectable]:
        """
        Fetch the injectables bound to a credential, in service order.

        Returns:
            Ordered list of injectables
        """
        payload = self._request(
            "GET", ApiPath.INJECTABLES, credential, params={"per_page": self.config.per_page}
        )
        items = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise MalformedResponseError(
                "Injectables response must be a list", endpoint=ApiPath.INJECTABLES
            )

        try:
            injectables = [Injectable.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise MalformedResponseError(
                "Injectables response does not match the injectable schema",
                endpoint=ApiPath.INJECTABLES,
                cause=e,
            )

        self.logger.info(
            "Injectables retrieved",
            extra={"credential": str(credential), "count": len(injectables)},
        )
        return injectables
