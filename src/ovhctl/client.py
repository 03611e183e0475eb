"""Signed REST transport for the OVHcloud API.

Every authenticated request carries the application key, the consumer key,
the unix timestamp at send time and a signature computed over the request.
See https://help.ovhcloud.com/csm/en-gb-api-getting-started-ovhcloud-api
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from . import __version__
from .errors import (
    ConfigurationError,
    DeserializationError,
    RequestBuildError,
    RequestFailed,
    TransportError,
)
from .models import Credential

logger = logging.getLogger(__name__)

X_OVH_APPLICATION = "X-Ovh-Application"
X_OVH_TIMESTAMP = "X-Ovh-Timestamp"
X_OVH_SIGNATURE = "X-Ovh-Signature"
X_OVH_CONSUMER = "X-Ovh-Consumer"

USER_AGENT = f"ovhctl/{__version__}"
SIGNATURE_VERSION = "$1$"


def sign(
    application_secret: str,
    consumer_key: str,
    method: str,
    url: str,
    body: str,
    timestamp: int,
) -> str:
    """Compute the value of the X-Ovh-Signature header."""
    payload = "+".join([application_secret, consumer_key, method, url, body, str(timestamp)])
    return SIGNATURE_VERSION + hashlib.sha1(payload.encode("utf-8")).hexdigest()


def _serialize(obj: Any) -> str:
    if obj is None or obj == "":
        return ""
    try:
        return json.dumps(obj)
    except (TypeError, ValueError) as e:
        raise RequestBuildError(f"could not serialize given object, {e}") from e


class OvhClient:
    """Issue signed calls against the API, strictly one at a time.

    `get`, `post` and `put` return the decoded JSON body (None when empty).
    `delete` treats 404 as success. No retry is attempted: the first failure
    is raised to the caller.
    """

    def __init__(
        self,
        endpoint: str,
        application_key: str,
        application_secret: str,
        consumer_key: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._endpoint = endpoint.rstrip("/")
        self._application_key = application_key
        self._application_secret = application_secret
        self._consumer_key = consumer_key
        self._session = session or requests.Session()
        self._clock = clock

    @classmethod
    def from_credential(cls, credential: Credential, **kwargs: Any) -> "OvhClient":
        return cls(
            credential.endpoint,
            credential.application_key,
            credential.application_secret,
            credential.consumer_key,
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # -------------------------------------------------------------------------
    # Authenticated calls
    # -------------------------------------------------------------------------

    def get(self, path: str) -> Any:
        return self._call("GET", path, None, authenticated=True)

    def post(self, path: str, body: Any = None) -> Any:
        return self._call("POST", path, body, authenticated=True)

    def put(self, path: str, body: Any = None) -> Any:
        return self._call("PUT", path, body, authenticated=True)

    def delete(self, path: str) -> None:
        self._call("DELETE", path, None, authenticated=True)

    # -------------------------------------------------------------------------
    # Unauthenticated calls (bootstrap login flow)
    # -------------------------------------------------------------------------

    def get_unauthenticated(self, path: str) -> Any:
        return self._call("GET", path, None, authenticated=False)

    def post_unauthenticated(self, path: str, body: Any = None) -> Any:
        return self._call("POST", path, body, authenticated=False)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._endpoint}/{path}"

    def _headers(self, method: str, url: str, body: str, authenticated: bool) -> Dict[str, str]:
        headers = {
            X_OVH_APPLICATION: self._application_key,
            "User-Agent": USER_AGENT,
        }
        if body:
            headers["Content-Type"] = "application/json"

        if authenticated:
            if not self._consumer_key:
                raise ConfigurationError(
                    f"could not sign request '{url}', no consumer key configured"
                )
            timestamp = int(self._clock())
            headers[X_OVH_TIMESTAMP] = str(timestamp)
            headers[X_OVH_CONSUMER] = self._consumer_key
            headers[X_OVH_SIGNATURE] = sign(
                self._application_secret,
                self._consumer_key,
                method,
                url,
                body,
                timestamp,
            )
        return headers

    def _call(self, method: str, path: str, obj: Any, *, authenticated: bool) -> Any:
        url = self._url(path)
        body = _serialize(obj)
        headers = self._headers(method, url, body, authenticated)

        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                data=body.encode("utf-8") if body else None,
            )
        except (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidHeader,
        ) as e:
            raise RequestBuildError(f"could not create request '{url}', {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"could not execute request '{url}', {e}") from e

        status = response.status_code
        logger.debug(f"{method} {url} -> {status}")

        if method == "DELETE":
            if 200 <= status < 300 or status == 404:
                return None
            raise RequestFailed(url, status, response.text)

        if not 200 <= status < 300:
            raise RequestFailed(url, status, None if method == "GET" else response.text)

        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DeserializationError(f"could not deserialize the payload of '{url}', {e}") from e
