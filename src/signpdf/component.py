"""Signature component that stamps a document and hands it to the workflow."""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Protocol

from signpdf.client import DEFAULT_SUBMIT_PATH
from signpdf.encoding import (
    decode_document,
    decode_image_data_url,
    encode_pdf,
    state_payload,
)
from signpdf.exceptions import ParseError, PersistenceError, StampError
from signpdf.placement import DEFAULT_SCALE, PlacementPolicy
from signpdf.stamper import PdfStamper

logger = logging.getLogger(__name__)

DEFAULT_PLACEMENT = PlacementPolicy.APPEND_BLANK_PAGE
DEFAULT_DOCUMENT_TITLE = "Signed Document"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class ComponentConfig:
    """Runtime configuration for the signature component."""

    placement: PlacementPolicy = DEFAULT_PLACEMENT
    scale: float = DEFAULT_SCALE
    data_uri: bool = True
    store_url: str | None = None
    store_token: str | None = None
    submit_path: str = DEFAULT_SUBMIT_PATH
    document_title: str = DEFAULT_DOCUMENT_TITLE
    refetch_after_save: bool = False

    @classmethod
    def from_env(cls) -> ComponentConfig:
        """Build configuration from environment variables."""
        try:
            placement = PlacementPolicy.parse(
                os.environ.get("SIGNPDF_PLACEMENT", DEFAULT_PLACEMENT.value)
            )
        except ValueError as exc:
            raise ValueError(f"SIGNPDF_PLACEMENT: {exc}") from exc

        raw_scale = os.environ.get("SIGNPDF_SCALE", str(DEFAULT_SCALE))
        try:
            scale = float(raw_scale)
        except ValueError as exc:
            raise ValueError(
                f"SIGNPDF_SCALE must be a number, got {raw_scale!r}"
            ) from exc
        if scale <= 0:
            raise ValueError(f"SIGNPDF_SCALE must be positive, got {scale}")

        store_url = os.environ.get("SIGNPDF_STORE_URL") or None
        store_token = os.environ.get("SIGNPDF_STORE_TOKEN") or None
        if bool(store_url) != bool(store_token):
            raise ValueError(
                "SIGNPDF_STORE_URL and SIGNPDF_STORE_TOKEN must be set together"
            )

        return cls(
            placement=placement,
            scale=scale,
            data_uri=_env_flag("SIGNPDF_DATA_URI", True),
            store_url=store_url,
            store_token=store_token,
            submit_path=os.environ.get(
                "SIGNPDF_STORE_SUBMIT_PATH", DEFAULT_SUBMIT_PATH
            ),
            document_title=os.environ.get(
                "SIGNPDF_DOCUMENT_TITLE", DEFAULT_DOCUMENT_TITLE
            ),
            refetch_after_save=_env_flag("SIGNPDF_REFETCH", False),
        )

    @property
    def store_configured(self) -> bool:
        return bool(self.store_url and self.store_token)


# -- Collaborators ------------------------------------------------------------


class SignatureCapture(Protocol):
    """Drawing surface that exports the signature as a PNG data URL."""

    def to_data_url(self) -> str: ...

    def clear(self) -> None: ...


class StateSink(Protocol):
    """Host workflow state that receives the stamped document."""

    def update_state(self, payload: str) -> None: ...


class DocumentStore(Protocol):
    """Storage service the stamped document is optionally saved to."""

    def submit(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def fetch_document(self, doc_id: int | str) -> bytes: ...


class ConfigurableInput(Protocol):
    def set_document(self, value: bytes | str | None) -> None: ...


class StampRequestHandler(Protocol):
    def handle_save(self) -> SaveResult: ...

    def handle_clear(self) -> ClearResult: ...


# -- Results ------------------------------------------------------------------


@dataclass
class StoredDocument:
    """Outcome of a successful save to the document store."""

    record: dict[str, Any]
    content: bytes | None = None


@dataclass
class SaveResult:
    """Outcome of a save command."""

    success: bool
    result_file: str | None = None
    payload: str | None = None
    error: StampError | None = None
    persistence: Future[StoredDocument] | None = None
    processing_ms: int | None = None

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None


@dataclass
class ClearResult:
    """Outcome of a clear command."""

    cleared: bool


@dataclass
class DocumentInput:
    """Holds the source document supplied by the host."""

    content: bytes | None = None

    def set_document(self, value: bytes | str | None) -> None:
        """Replace the document; ``None`` keeps the current one.

        Raises:
            ParseError: If a text value is not valid base64.
        """
        if value is None:
            return
        if isinstance(value, str):
            self.content = decode_document(value)
        else:
            self.content = bytes(value)


# -- Component ----------------------------------------------------------------


class SignPdfComponent:
    """Stamps captured signatures onto the configured document.

    Implements ``ConfigurableInput`` and ``StampRequestHandler`` by
    delegating to a ``DocumentInput`` and a ``PdfStamper``.
    """

    def __init__(
        self,
        config: ComponentConfig,
        capture: SignatureCapture,
        sink: StateSink,
        store: DocumentStore | None = None,
        *,
        stamper: PdfStamper | None = None,
    ) -> None:
        self._config = config
        self._capture = capture
        self._sink = sink
        self._store = store
        self._input = DocumentInput()
        self._stamper = stamper or PdfStamper(
            policy=config.placement, scale=config.scale
        )
        self._executor: ThreadPoolExecutor | None = None
        self.result_file: str | None = None
        self._last_persistence: Future[StoredDocument] | None = None

    def __enter__(self) -> SignPdfComponent:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Wait for pending saves and release the background worker."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @property
    def document(self) -> bytes | None:
        return self._input.content

    def set_document(self, value: bytes | str | None) -> None:
        self._input.set_document(value)

    @property
    def displayed_document(self) -> bytes | None:
        """The stored file fetched back after the last save.

        ``None`` until that save's ``persistence`` future has completed.
        """
        future = self._last_persistence
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result().content

    # -- Commands -------------------------------------------------------------

    def handle_save(self) -> SaveResult:
        """Stamp the captured signature and publish the result.

        Stamping failures are logged and returned on the result. Storage
        runs in the background and never affects the returned result.
        """
        start_time = time.monotonic()
        try:
            signature_png = decode_image_data_url(self._capture.to_data_url())
            source_pdf = self._input.content
            if source_pdf is None:
                raise ParseError("No source document has been provided")
            stamped_pdf = self._stamper.stamp(source_pdf, signature_png)
        except StampError as exc:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.error("Failed to sign document: %s", exc)
            return SaveResult(success=False, error=exc, processing_ms=elapsed_ms)

        result_file = encode_pdf(stamped_pdf, data_uri=self._config.data_uri)
        payload = state_payload(result_file, data_uri=self._config.data_uri)
        self.result_file = result_file
        self._sink.update_state(payload)

        persistence = None
        if self._store is not None:
            persistence = self._submit_in_background(payload)
        self._last_persistence = persistence

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "Signature captured: %d byte document in %dms",
            len(stamped_pdf),
            elapsed_ms,
        )
        return SaveResult(
            success=True,
            result_file=result_file,
            payload=payload,
            persistence=persistence,
            processing_ms=elapsed_ms,
        )

    def handle_clear(self) -> ClearResult:
        """Clear the drawing surface and forget the last result."""
        self._capture.clear()
        self.result_file = None
        self._last_persistence = None
        logger.info("Signature cleared")
        return ClearResult(cleared=True)

    # -- Persistence ----------------------------------------------------------

    def _submit_in_background(self, payload: str) -> Future[StoredDocument]:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="signpdf-store"
            )
        future = self._executor.submit(self._store_document, payload)
        future.add_done_callback(self._log_persistence)
        return future

    def _store_document(self, payload: str) -> StoredDocument:
        assert self._store is not None
        title = self._config.document_title
        record = self._store.submit(
            {
                "title": title,
                "path_on_client": f"{title}.pdf",
                "version_data": payload,
            }
        )

        content = None
        doc_id = record.get("id")
        if self._config.refetch_after_save and doc_id is not None:
            content = self._store.fetch_document(doc_id)
        return StoredDocument(record=record, content=content)

    @staticmethod
    def _log_persistence(future: Future[StoredDocument]) -> None:
        exc = future.exception()
        if exc is None:
            logger.info(
                "Stored signed document (id=%s)",
                future.result().record.get("id", "?"),
            )
        elif isinstance(exc, PersistenceError):
            logger.error("Failed to store signed document: %s", exc)
        else:
            logger.error(
                "Unexpected error storing signed document", exc_info=exc
            )
