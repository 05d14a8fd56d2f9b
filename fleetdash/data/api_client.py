"""Async REST client for the fleet API.

Every request carries ``Authorization: Bearer <token>`` and ``X-Tenant`` when
the session store has them. A 401 wipes the stored session before raising
``AuthenticationError`` so the UI can send the user back to sign-in.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import aiohttp

from fleetdash.data.session_store import SessionStore
from fleetdash.infra.exceptions import APIError, AuthenticationError, NetworkError, NotFoundError
from fleetdash.infra.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileUpload:
    """A file part for multipart requests."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class BinaryResponse:
    content: bytes
    content_type: str
    filename: Optional[str] = None


def _clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop ``None`` values; aiohttp refuses bools so send them as true/false."""
    cleaned: Dict[str, Any] = {}
    for k, v in (params or {}).items():
        if v is None:
            continue
        if isinstance(v, bool):
            cleaned[k] = "true" if v else "false"
        else:
            cleaned[k] = v
    return cleaned


def build_form(fields: Mapping[str, Any]) -> aiohttp.FormData:
    """Multipart body from a flat mapping; ``None`` fields are omitted."""
    form = aiohttp.FormData()
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, FileUpload):
            form.add_field(key, value.content, filename=value.filename, content_type=value.content_type)
        elif isinstance(value, bool):
            form.add_field(key, "1" if value else "0")
        elif isinstance(value, (dict, list)):
            form.add_field(key, json.dumps(value, ensure_ascii=False))
        else:
            form.add_field(key, str(value))
    return form


def _filename_from_disposition(header: Optional[str]) -> Optional[str]:
    if not header or "filename=" not in header:
        return None
    name = header.split("filename=", 1)[1].split(";", 1)[0].strip()
    return name.strip('"') or None


class FleetApiClient:
    """Thin aiohttp wrapper; use as ``async with FleetApiClient(...) as client``."""

    def __init__(
        self,
        base_url: str,
        session_store: Optional[SessionStore] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_store = session_store
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        if not self.session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"},
            )

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None

    def _auth_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.session_store is None:
            return headers
        token = self.session_store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        tenant_id = self.session_store.tenant_id
        if tenant_id:
            headers["X-Tenant"] = tenant_id
        return headers

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        form: Optional[Mapping[str, Any]] = None,
        binary: bool = False,
    ) -> Any:
        """
        Send one request and decode the response

        Args:
            method: HTTP verb
            path: path relative to the API base URL
            params: query string values
            json_body: JSON payload
            form: multipart payload (values may be ``FileUpload``)
            binary: return a ``BinaryResponse`` instead of decoded JSON

        Returns:
            decoded JSON (``{}`` for empty bodies) or ``BinaryResponse``
        """
        await self._ensure_session()
        url = self.url_for(path)
        kwargs: Dict[str, Any] = {"params": _clean_params(params), "headers": self._auth_headers()}
        if form is not None:
            kwargs["data"] = build_form(form)
        elif json_body is not None:
            kwargs["json"] = json_body

        logger.debug(f"{method} {url} params={kwargs['params']}")
        try:
            async with self.session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    await self._raise_for_status(response, url)
                if binary:
                    return BinaryResponse(
                        content=await response.read(),
                        content_type=response.headers.get("Content-Type", "application/octet-stream"),
                        filename=_filename_from_disposition(response.headers.get("Content-Disposition")),
                    )
                text = await response.text()
        except aiohttp.ClientError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NetworkError(f"Network error: {e}", url=url)
        except asyncio.TimeoutError:
            logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise NetworkError("Request timed out", url=url)

        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            raise APIError("Invalid JSON in API response", status_code=response.status, url=url, response=text[:500])

    async def _raise_for_status(self, response: aiohttp.ClientResponse, url: str) -> None:
        body: Any
        try:
            body = await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError, ValueError):
            body = None
        message = body.get("message") if isinstance(body, dict) else None

        if response.status == 401:
            logger.warning(f"401 from {url}; clearing stored session")
            if self.session_store is not None:
                self.session_store.clear_auth()
            raise AuthenticationError(url=url, response=body)
        if response.status == 404:
            raise NotFoundError(message or "Not found", url=url, response=body)
        logger.error(f"API error {response.status} from {url}: {message}")
        raise APIError(message or f"Request failed with status {response.status}", status_code=response.status, url=url, response=body)

    # ------------------------------------------------------------------
    # verb shortcuts
    # ------------------------------------------------------------------

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Any = None, form: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("POST", path, json_body=json_body, form=form)

    async def put(self, path: str, json_body: Any = None) -> Any:
        return await self.request("PUT", path, json_body=json_body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def download(self, path: str, params: Optional[Mapping[str, Any]] = None) -> BinaryResponse:
        return await self.request("GET", path, params=params, binary=True)


def unwrap(payload: Any, default: Any = None) -> Any:
    """Return the ``data`` member of a ``{success, data, message}`` envelope."""
    if isinstance(payload, dict) and "data" in payload:
        data = payload["data"]
        return default if data is None else data
    return default if payload is None else payload
