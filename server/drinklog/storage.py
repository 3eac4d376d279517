"""
Document store backed by a JSON file in a GitHub repository, plus an
in-memory double for tests/dev.

Every write is conditional on the revision (blob SHA) the caller last saw.
A stale revision is reported as a conflict instead of overwriting the newer
content.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol
from urllib.parse import quote

import requests

from drinklog.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    StoreError,
    utc_timestamp,
)
from drinklog.records import Document

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


@dataclass
class Snapshot:
    document: Document
    revision: Optional[str]


@dataclass
class WriteResult:
    ok: bool
    revision: Optional[str] = None
    conflict: bool = False


class DocumentStore(Protocol):
    """Defines the operations the API needs from the remote data file."""

    def read(self) -> Document:
        ...

    def snapshot(self) -> Snapshot:
        ...

    def current_revision(self) -> Optional[str]:
        ...

    def write_if_match(
        self, doc: Document, expected_revision: Optional[str]
    ) -> WriteResult:
        ...

    def write(self, doc: Document) -> WriteResult:
        ...


def serialize_document(doc: Document) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False)


def parse_document(text: str) -> Document:
    if not text.strip():
        return {}
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreError(f"Stored data file is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise StoreError("Stored data file must contain a JSON object")
    return parsed


def commit_message() -> str:
    return f"Update drink records - {utc_timestamp()}"


def blob_sha(content: bytes) -> str:
    """SHA-1 of a git blob, the revision GitHub reports for file contents."""
    header = f"blob {len(content)}\0".encode("utf-8")
    return hashlib.sha1(header + content).hexdigest()


@dataclass
class Revision:
    sha: str
    message: str
    content: str


@dataclass
class InMemoryDocumentStore:
    """Test double for the remote data file."""

    history: list[Revision] = field(default_factory=list)
    # Raised (once) by the next store call, to simulate host failures.
    fail_with: Optional[Exception] = None

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def seed(self, doc: Document, message: str = "Seed drink records") -> str:
        content = serialize_document(doc)
        sha = blob_sha(content.encode("utf-8"))
        self.history.append(Revision(sha=sha, message=message, content=content))
        return sha

    def read(self) -> Document:
        return self.snapshot().document

    def snapshot(self) -> Snapshot:
        self._check_failure()
        if not self.history:
            return Snapshot(document={}, revision=None)
        latest = self.history[-1]
        return Snapshot(document=parse_document(latest.content), revision=latest.sha)

    def current_revision(self) -> Optional[str]:
        self._check_failure()
        return self.history[-1].sha if self.history else None

    def write_if_match(
        self, doc: Document, expected_revision: Optional[str]
    ) -> WriteResult:
        if self.current_revision() != expected_revision:
            return WriteResult(ok=False, conflict=True)
        sha = self.seed(doc, message=commit_message())
        return WriteResult(ok=True, revision=sha)

    def write(self, doc: Document) -> WriteResult:
        result = self.write_if_match(doc, self.current_revision())
        if result.conflict:
            raise ConflictError("Data file changed during write")
        return result


@dataclass
class GitHubDocumentStore:
    """
    One JSON file in a GitHub repository, accessed through the contents API.
    """

    owner: str
    repo: str
    path: str
    token: Optional[str] = None
    branch: str = "main"
    api_url: str = "https://api.github.com"
    timeout: float = 30

    def __post_init__(self):
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
        )
        if self.token:
            self._session.headers["Authorization"] = f"Bearer {self.token}"

    @property
    def _repo_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}"

    @property
    def _contents_url(self) -> str:
        return f"{self._repo_url}/contents/{quote(self.path.lstrip('/'))}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("GitHub %s %s failed: %s", method, url, exc)
            raise StoreError(
                f"GitHub request failed: {exc}", category="network"
            ) from exc

    def _raise_for_status(self, response: requests.Response, action: str) -> None:
        status = response.status_code
        try:
            detail = response.json().get("message") or response.reason
        except ValueError:
            detail = response.text or response.reason
        message = f"Failed to {action} {self.path}: {status} {detail}"
        logger.error(message)
        if status in (401, 403):
            raise AuthError(message, status=status)
        if status == 404:
            raise NotFoundError(message, status=status)
        if status == 409:
            raise ConflictError(message, status=status)
        raise StoreError(message, status=status)

    def _get_contents(self) -> Optional[dict]:
        response = self._request("GET", self._contents_url, params={"ref": self.branch})
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            self._raise_for_status(response, "read")
        payload = response.json()
        if not isinstance(payload, dict) or payload.get("type", "file") != "file":
            raise StoreError(f"{self.path} is not a file in {self.owner}/{self.repo}")
        return payload

    def _decode_content(self, payload: dict) -> str:
        content = payload.get("content") or ""
        if payload.get("encoding") != "base64":
            # Files over 1 MB are returned without inline content.
            response = self._request("GET", f"{self._repo_url}/git/blobs/{payload['sha']}")
            if response.status_code >= 400:
                self._raise_for_status(response, "read")
            content = response.json().get("content") or ""
        return base64.b64decode(content).decode("utf-8")

    def read(self) -> Document:
        return self.snapshot().document

    def snapshot(self) -> Snapshot:
        payload = self._get_contents()
        if payload is None:
            return Snapshot(document={}, revision=None)
        return Snapshot(
            document=parse_document(self._decode_content(payload)),
            revision=payload.get("sha"),
        )

    def current_revision(self) -> Optional[str]:
        payload = self._get_contents()
        return payload.get("sha") if payload else None

    def write_if_match(
        self, doc: Document, expected_revision: Optional[str]
    ) -> WriteResult:
        content = serialize_document(doc).encode("utf-8")
        body = {
            "message": commit_message(),
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }
        if expected_revision:
            body["sha"] = expected_revision

        response = self._request("PUT", self._contents_url, json=body)
        if response.status_code == 409 or (
            response.status_code == 422 and not expected_revision
        ):
            logger.warning(
                "Conflicting write to %s (expected revision %s)",
                self.path,
                expected_revision,
            )
            return WriteResult(ok=False, conflict=True)
        if response.status_code >= 400:
            self._raise_for_status(response, "write")

        revision = (response.json().get("content") or {}).get("sha")
        logger.info("Wrote %s at revision %s", self.path, revision)
        return WriteResult(ok=True, revision=revision)

    def write(self, doc: Document) -> WriteResult:
        result = self.write_if_match(doc, self.current_revision())
        if result.conflict:
            raise ConflictError(f"{self.path} changed during write")
        return result
