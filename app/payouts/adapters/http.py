"""
JSON-over-HTTP client shared by the collaborator adapters.

Every call goes through JsonHttpClient.request(), which applies the
configured timeout, logs the call with its duration and translates
failures into payout exceptions:

    timeout, connection error, 5xx, unparseable body
        -> CollaboratorUnavailableError
    4xx with {"code": ..., "message": ...}
        -> CollaboratorBusinessError carrying that code and message
    other 4xx
        -> CollaboratorBusinessError with code "<SERVICE>_HTTP_<status>"

No retry is layered on top; callers decide what a failure means.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import requests

from payouts.exceptions import CollaboratorBusinessError, CollaboratorUnavailableError

if TYPE_CHECKING:
    from typing import Any


class JsonHttpClient:
    """
    Thin requests.Session wrapper for one collaborator service.

    Args:
        base_url: Service root, e.g. "https://billing.internal/api/v1"
        api_key: Sent as a Bearer token when set
        timeout: Per-request timeout in seconds
        service_name: Used in logs and generated error codes
        session: Optional preconfigured requests.Session
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        service_name: str = "collaborator",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.service_name = service_name
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def get_logger(self) -> logging.Logger:
        return logging.getLogger(f"{type(self).__module__}.{type(self).__name__}")

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        return self.request("GET", path, params=params, allow_not_found=allow_not_found)

    def post(self, path: str, payload: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, json=payload)

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Perform one request and return the decoded JSON body.

        Returns:
            Decoded body, None for an empty body, or None for a 404 when
            ``allow_not_found`` is set

        Raises:
            CollaboratorUnavailableError: Transport failure or 5xx
            CollaboratorBusinessError: 4xx answer
        """
        logger = self.get_logger()
        url = f"{self.base_url}/{path.lstrip('/')}"
        log_context = {
            "service": self.service_name,
            "method": method,
            "url": url,
            "params": params,
            "payload": json,
        }

        start_time = time.time()
        try:
            response = self.session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
        except requests.Timeout as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Collaborator request timed out",
                extra={**log_context, "duration_ms": duration_ms},
            )
            raise CollaboratorUnavailableError(
                f"{self.service_name} request timed out",
                details={"service": self.service_name, "url": url},
            ) from e
        except requests.RequestException as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Collaborator request failed: {type(e).__name__}",
                extra={**log_context, "duration_ms": duration_ms},
                exc_info=True,
            )
            raise CollaboratorUnavailableError(
                f"{self.service_name} is unavailable",
                details={"service": self.service_name, "url": url},
            ) from e

        duration_ms = (time.time() - start_time) * 1000
        log_context = {
            **log_context,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }

        if response.status_code == 404 and allow_not_found:
            logger.info("Collaborator resource not found", extra=log_context)
            return None

        if response.status_code >= 500:
            logger.error("Collaborator server error", extra=log_context)
            raise CollaboratorUnavailableError(
                f"{self.service_name} returned {response.status_code}",
                details={"service": self.service_name, "status_code": response.status_code},
            )

        if response.status_code >= 400:
            logger.warning("Collaborator rejected request", extra=log_context)
            raise self._business_error(response)

        logger.info("Collaborator request completed", extra=log_context)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Collaborator returned malformed JSON", extra=log_context)
            raise CollaboratorUnavailableError(
                f"{self.service_name} returned a malformed body",
                details={"service": self.service_name, "url": url},
            ) from e

    def _business_error(self, response: requests.Response) -> CollaboratorBusinessError:
        details = {"service": self.service_name, "status_code": response.status_code}
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("code") and body.get("message"):
            if isinstance(body.get("details"), dict):
                details.update(body["details"])
            return CollaboratorBusinessError(
                body["message"], error_code=str(body["code"]), details=details
            )

        return CollaboratorBusinessError(
            f"{self.service_name} rejected the request",
            error_code=f"{self.service_name.upper()}_HTTP_{response.status_code}",
            details=details,
        )


__all__ = [
    "JsonHttpClient",
]
