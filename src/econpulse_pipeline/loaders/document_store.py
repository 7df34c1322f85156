"""
loaders/document_store.py — Read-merge-write publisher for the remote JSON document.

The published document lives in one file of a remote document (GitHub
Gist API shape). Every run:
  - Reads the current document (GET {base}/{id}); an unreadable or
    malformed document falls back to an empty base and is logged
  - Shallow-merges this run's country sections over it; unrelated
    top-level sections are carried through untouched and "lastUpdate"
    is refreshed
  - Writes the whole merged document back in one PATCH

There is no version/ETag check: two runs racing on the same document id
can lose one run's update.

Usage:
    from econpulse_pipeline.loaders.document_store import DocumentStoreLoader

    loader = DocumentStoreLoader(
        base_url=settings.document_store_url,
        token=settings.document_store_token,
        file_name=settings.document_file_name,
    )
    result = await loader.publish({"US": us_section}, settings.document_id)
    print(result.sections_updated, result.base_recovered)
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx
import structlog

from econpulse_pipeline.errors import PublishReadError, PublishWriteError
from econpulse_shared.constants import LAST_UPDATED_KEY

log = structlog.get_logger(__name__)

# Characters of an error body kept in exceptions and logs
_BODY_PREVIEW = 2000


@dataclass
class PublishResult:
    """Summary of one publish() call."""

    document_id: str
    sections_updated: list[str] = field(default_factory=list)
    sections_carried: list[str] = field(default_factory=list)
    base_recovered: bool = False   # prior document unreadable, started from {}
    written: bool = False
    bytes_written: int = 0
    duration_ms: int = 0

    @property
    def status(self) -> str:
        if not self.written:
            return "dry_run"
        return "recovered" if self.base_recovered else "success"


def serialize_document(document: Mapping[str, Any]) -> str:
    """JSON text stored in the document file."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def merge_documents(
    prior: Mapping[str, Any],
    partial: Mapping[str, Any],
    *,
    updated_at: datetime,
) -> dict[str, Any]:
    """
    Shallow-merge partial over prior at the top level.

    Sections named in partial fully replace the prior ones; every other
    prior section is carried through as the same object. The
    "lastUpdate" key is always set to updated_at.

    Args:
        prior:      Previously published document (possibly empty).
        partial:    Sections produced by this run.
        updated_at: Timestamp of this run.

    Returns:
        New merged document; neither input is mutated.
    """
    merged: dict[str, Any] = dict(prior)
    merged.update(partial)
    merged[LAST_UPDATED_KEY] = updated_at.astimezone(timezone.utc).isoformat()
    return merged


class DocumentStoreLoader:
    """
    Handles the single read-merge-write against the document store.

    Uses a bearer token; the store is treated as overwrite-whole-file.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        file_name: str = "economic-data.json",
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._file_name = file_name
        self._timeout = timeout

    @property
    def file_name(self) -> str:
        return self._file_name

    def _url(self, document_id: str) -> str:
        return f"{self._base_url}/{document_id}"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
        }

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def read(self, document_id: str) -> dict[str, Any]:
        """
        Fetch and parse the current document file.

        Returns:
            Parsed JSON object, or {} when the document has no such file yet.

        Raises:
            PublishReadError: transport failure, non-2xx status, or content
                that is not a JSON object.
        """
        url = self._url(document_id)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            raise PublishReadError(f"Document read failed: {exc!r}") from exc

        if response.is_error:
            raise PublishReadError(
                f"Document read failed: HTTP {response.status_code} - "
                f"{response.text[:_BODY_PREVIEW]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise PublishReadError("Document response is not valid JSON") from exc

        files = payload.get("files") if isinstance(payload, dict) else None
        if not isinstance(files, dict):
            raise PublishReadError("Document response has no files mapping")

        entry = files.get(self._file_name)
        if entry is None:
            log.info("document_file_missing", document_id=document_id, file=self._file_name)
            return {}

        content = entry.get("content") if isinstance(entry, dict) else None
        if not content:
            return {}

        try:
            document = json.loads(content)
        except ValueError as exc:
            raise PublishReadError(f"{self._file_name} is not valid JSON") from exc

        if not isinstance(document, dict):
            raise PublishReadError(f"{self._file_name} does not hold a JSON object")
        return document

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def write(self, document_id: str, document: Mapping[str, Any]) -> int:
        """
        Replace the document file with the serialized document.

        Returns:
            Number of characters written.

        Raises:
            PublishWriteError: transport failure or non-2xx response.
        """
        content = serialize_document(document)
        body = {"files": {self._file_name: {"content": content}}}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.patch(
                    self._url(document_id),
                    headers=self._headers(),
                    json=body,
                )
        except httpx.HTTPError as exc:
            raise PublishWriteError(f"Document write failed: {exc!r}") from exc

        if response.is_error:
            text = response.text[:_BODY_PREVIEW]
            raise PublishWriteError(
                f"Document write failed: HTTP {response.status_code} - {text}",
                status_code=response.status_code,
                body=text,
            )
        return len(content)

    # ------------------------------------------------------------------
    # Read-merge-write
    # ------------------------------------------------------------------

    async def publish(
        self,
        partial: Mapping[str, Any],
        document_id: str,
        *,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> PublishResult:
        """
        Merge partial into the remote document and write it back.

        Args:
            partial:     Top-level sections produced by this run.
            document_id: Remote document id.
            now:         Run timestamp (default: current UTC time).
            dry_run:     Read and merge but skip the write.

        Returns:
            PublishResult.

        Raises:
            PublishWriteError: the write was rejected.
        """
        t0 = time.monotonic()
        now = now or datetime.now(timezone.utc)
        result = PublishResult(document_id=document_id)
        pub_log = log.bind(document_id=document_id, file=self._file_name)

        try:
            prior = await self.read(document_id)
        except PublishReadError as exc:
            pub_log.warning("document_read_fallback", error=str(exc), base="empty")
            prior = {}
            result.base_recovered = True

        merged = merge_documents(prior, partial, updated_at=now)
        result.sections_updated = sorted(partial)
        result.sections_carried = sorted(
            k for k in prior if k not in partial and k != LAST_UPDATED_KEY
        )
        pub_log.info(
            "document_merged",
            sections_updated=result.sections_updated,
            sections_carried=result.sections_carried,
        )

        if dry_run:
            pub_log.info("document_write_skipped", reason="dry_run")
        else:
            try:
                result.bytes_written = await self.write(document_id, merged)
            except PublishWriteError as exc:
                pub_log.error(
                    "document_write_failed",
                    status_code=exc.status_code,
                    body=(exc.body or "")[:200],
                )
                raise
            result.written = True

        result.duration_ms = int((time.monotonic() - t0) * 1000)
        pub_log.info(
            "document_published" if result.written else "document_publish_dry_run",
            bytes_written=result.bytes_written,
            duration_ms=result.duration_ms,
            status=result.status,
        )
        return result
