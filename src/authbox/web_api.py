"""Default network collaborator for profile, session and logout calls.

:class:`WebAPI` wraps an :class:`httpx.Client` and keeps, per widget
instance, the client id and domain it talks to. Widgets delegate
``get_profile``, ``parse_hash`` and ``logout`` here entirely; the state
engine never sees the network. Hosts with their own API client pass it to
the widget instead.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx

from authbox.exceptions import NotFoundError, WebAPIError

logger = logging.getLogger(__name__)

_TOKEN_FIELDS = ("access_token", "id_token", "refresh_token", "state", "token_type", "scope")


class WebAPI:
    """Blocking client for the authentication server.

    Args:
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use
            :class:`httpx.MockTransport`).

    Example::

        api = WebAPI()
        api.register("authbox-1", "my-client", "example.auth0.com")
        profile = api.get_profile("authbox-1", access_token)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._instances: dict[str, tuple[str, str]] = {}

    def register(self, instance_id: str, client_id: str, domain: str) -> None:
        self._instances[instance_id] = (client_id, domain)

    def unregister(self, instance_id: str) -> None:
        self._instances.pop(instance_id, None)

    def base_url(self, instance_id: str) -> str:
        _, domain = self._lookup(instance_id)
        if domain.startswith(("http://", "https://")):
            return domain.rstrip("/")
        return f"https://{domain.rstrip('/')}"

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def get_profile(self, instance_id: str, token: str) -> dict[str, Any]:
        """Fetch the user profile for an access token from ``/userinfo``.

        Raises:
            WebAPIError: On a non-2xx response or a network failure.
        """
        response = self._request(
            instance_id,
            "GET",
            "/userinfo",
            headers={"Authorization": f"Bearer {token}"},
        )
        return response.json()

    def logout(self, instance_id: str, query: Optional[dict[str, Any]] = None) -> str:
        """Call ``/v2/logout`` for the instance's client.

        Returns:
            The logout URL that was requested.
        """
        client_id, _ = self._lookup(instance_id)
        params = {"client_id": client_id, **(query or {})}
        response = self._request(instance_id, "GET", "/v2/logout", params=params)
        return str(response.request.url)

    def parse_hash(self, instance_id: str, hash: Optional[str] = None) -> Optional[dict[str, Any]]:
        """Parse an authentication result from a callback URL fragment.

        Returns:
            The token fields (plus ``expires_in`` as an int and the decoded
            ``id_token_payload`` when an id token is present), or ``None``
            when the fragment carries no authentication result.

        Raises:
            WebAPIError: If the fragment carries an ``error``.
        """
        self._lookup(instance_id)
        fragment = (hash or "").lstrip("#")
        values = dict(parse_qsl(fragment, keep_blank_values=True))
        if "error" in values:
            raise WebAPIError(
                values.get("error_description") or values["error"],
                code=values["error"],
            )
        if "access_token" not in values and "id_token" not in values:
            return None

        result: dict[str, Any] = {k: values[k] for k in _TOKEN_FIELDS if k in values}
        if "expires_in" in values:
            try:
                result["expires_in"] = int(values["expires_in"])
            except ValueError:
                raise WebAPIError(f"Invalid expires_in: {values['expires_in']!r}") from None
        if "id_token" in values:
            result["id_token_payload"] = decode_jwt_payload(values["id_token"])
        return result

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _lookup(self, instance_id: str) -> tuple[str, str]:
        try:
            return self._instances[instance_id]
        except KeyError:
            raise NotFoundError(f"No widget instance with id '{instance_id}'") from None

    def _request(self, instance_id: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self.base_url(instance_id) + path
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise WebAPIError(f"Request to {url} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        if response.status_code >= 400:
            code = None
            message = f"{method} {path} returned HTTP {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                code = body.get("error") or body.get("code")
                message = body.get("error_description") or body.get("description") or message
            raise WebAPIError(message, code=code, status_code=response.status_code)
        return response


def decode_jwt_payload(token: str) -> dict[str, Any]:
    """Decode the payload segment of a JWT without verifying its signature.

    Raises:
        WebAPIError: If the token is not a well-formed JWT.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise WebAPIError("Malformed id_token")
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment))
    except (ValueError, TypeError) as exc:
        raise WebAPIError(f"Malformed id_token payload: {exc}") from exc
    if not isinstance(payload, dict):
        raise WebAPIError("Malformed id_token payload")
    return payload
