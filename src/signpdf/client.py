"""Synchronous API client for the document-storage service."""

from __future__ import annotations

from typing import Any

import httpx

from signpdf.exceptions import (
    DocumentStoreAPIError,
    DocumentStoreAuthError,
    DocumentStoreConnectionError,
)

DEFAULT_SUBMIT_PATH = "/api/documents/"


class DocumentStoreClient:
    """Synchronous wrapper around the document-storage REST API.

    Usage::

        with DocumentStoreClient("http://localhost:8000", "mytoken") as client:
            record = client.submit({"title": "Signed", "version_data": b64})
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        submit_path: str = DEFAULT_SUBMIT_PATH,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._submit_path = "/" + submit_path.strip("/") + "/"
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"Authorization": f"Token {token}"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> DocumentStoreClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # -- Internal helpers -----------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and translate errors into our exception hierarchy."""
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.ConnectError as exc:
            raise DocumentStoreConnectionError(
                f"Cannot connect to {self._base_url}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise DocumentStoreConnectionError(
                f"Request to {self._base_url} timed out"
            ) from exc

        if resp.status_code == 401:
            raise DocumentStoreAuthError("Invalid or expired API token")
        if resp.status_code == 403:
            raise DocumentStoreAuthError("Insufficient permissions")
        if resp.status_code >= 400:
            detail = resp.text[:500]
            raise DocumentStoreAPIError(resp.status_code, detail)

        return resp

    # -- Public API -----------------------------------------------------------

    def submit(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Store a document version and return the created record."""
        resp = self._request("POST", self._submit_path, json=payload)
        return resp.json()

    def fetch_document(self, doc_id: int | str) -> bytes:
        """Download the stored file for a document."""
        resp = self._request("GET", f"{self._submit_path}{doc_id}/download/")
        return resp.content
