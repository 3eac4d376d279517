import base64
import json
import unittest
from unittest.mock import MagicMock

import requests

from drinklog.errors import AuthError, ConflictError, NotFoundError, StoreError
from drinklog.storage import (
    GitHubDocumentStore,
    InMemoryDocumentStore,
    blob_sha,
    serialize_document,
)


def _response(status_code: int, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = "reason"
    response.json.return_value = payload if payload is not None else {}
    response.text = json.dumps(payload or {})
    return response


def _contents(doc: dict, sha: str = "abc123") -> dict:
    encoded = base64.b64encode(serialize_document(doc).encode("utf-8")).decode()
    # GitHub wraps base64 content at 60 characters.
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"type": "file", "encoding": "base64", "content": wrapped, "sha": sha}


class GitHubDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = GitHubDocumentStore(
            owner="club",
            repo="records",
            path="data/drink_data.json",
            token="secret",
            branch="main",
        )
        self.request = MagicMock()
        self.store._session.request = self.request

    def test_session_headers(self):
        headers = self.store._session.headers
        self.assertEqual(headers["Authorization"], "Bearer secret")
        self.assertEqual(headers["Accept"], "application/vnd.github+json")

    def test_read_decodes_document(self):
        doc = {"2024-01-01": {"alice": {"beer": 2}}}
        self.request.return_value = _response(200, _contents(doc))

        self.assertEqual(self.store.read(), doc)
        method, url = self.request.call_args.args
        self.assertEqual(method, "GET")
        self.assertEqual(
            url,
            "https://api.github.com/repos/club/records/contents/data/drink_data.json",
        )
        self.assertEqual(self.request.call_args.kwargs["params"], {"ref": "main"})

    def test_read_missing_file_is_empty(self):
        self.request.return_value = _response(404, {"message": "Not Found"})
        snapshot = self.store.snapshot()
        self.assertEqual(snapshot.document, {})
        self.assertIsNone(snapshot.revision)

    def test_read_large_file_uses_blob_api(self):
        doc = {"2024-01-01": {"bob": {"red": 1}}}
        blob = _contents(doc, sha="big")
        self.request.side_effect = [
            _response(200, {"type": "file", "encoding": "none", "content": "", "sha": "big"}),
            _response(200, {"content": blob["content"], "encoding": "base64"}),
        ]
        self.assertEqual(self.store.read(), doc)
        self.assertTrue(self.request.call_args.args[1].endswith("/git/blobs/big"))

    def test_read_auth_failure(self):
        self.request.return_value = _response(401, {"message": "Bad credentials"})
        with self.assertRaises(AuthError) as ctx:
            self.store.read()
        self.assertEqual(ctx.exception.status, 401)

    def test_read_server_error(self):
        self.request.return_value = _response(502, {"message": "Bad gateway"})
        with self.assertRaises(StoreError) as ctx:
            self.store.read()
        self.assertEqual(ctx.exception.status, 502)

    def test_read_network_error(self):
        self.request.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(StoreError) as ctx:
            self.store.read()
        self.assertEqual(ctx.exception.category, "network")

    def test_read_rejects_non_object_document(self):
        self.request.return_value = _response(200, _contents([1, 2]))
        with self.assertRaises(StoreError):
            self.store.read()

    def test_write_updates_with_current_revision(self):
        doc = {"2024-03-05": {"baijiu": 2, "beer": 3}}
        self.request.side_effect = [
            _response(200, _contents({}, sha="old")),
            _response(200, {"content": {"sha": "new"}}),
        ]

        result = self.store.write(doc)

        self.assertTrue(result.ok)
        self.assertEqual(result.revision, "new")
        method, url = self.request.call_args.args
        self.assertEqual(method, "PUT")
        body = self.request.call_args.kwargs["json"]
        self.assertEqual(body["sha"], "old")
        self.assertEqual(body["branch"], "main")
        self.assertTrue(body["message"].startswith("Update drink records - "))
        self.assertEqual(
            json.loads(base64.b64decode(body["content"]).decode("utf-8")), doc
        )

    def test_write_creates_file_without_revision(self):
        self.request.side_effect = [
            _response(404, {"message": "Not Found"}),
            _response(201, {"content": {"sha": "first"}}),
        ]
        result = self.store.write({"2024-01-01": {}})
        self.assertEqual(result.revision, "first")
        self.assertNotIn("sha", self.request.call_args.kwargs["json"])

    def test_write_if_match_reports_stale_revision(self):
        self.request.return_value = _response(409, {"message": "sha does not match"})
        result = self.store.write_if_match({"2024-01-01": {}}, "stale")
        self.assertFalse(result.ok)
        self.assertTrue(result.conflict)

    def test_write_create_race_is_conflict(self):
        self.request.return_value = _response(422, {"message": "sha wasn't supplied"})
        result = self.store.write_if_match({"2024-01-01": {}}, None)
        self.assertTrue(result.conflict)

    def test_write_raises_conflict(self):
        self.request.side_effect = [
            _response(200, _contents({}, sha="old")),
            _response(409, {"message": "conflict"}),
        ]
        with self.assertRaises(ConflictError):
            self.store.write({"2024-01-01": {}})

    def test_write_forbidden_is_auth_error(self):
        self.request.return_value = _response(403, {"message": "Resource not accessible"})
        with self.assertRaises(AuthError):
            self.store.write_if_match({}, "old")

    def test_write_missing_repository(self):
        self.request.return_value = _response(404, {"message": "Not Found"})
        with self.assertRaises(NotFoundError):
            self.store.write_if_match({}, "old")


class InMemoryDocumentStoreTests(unittest.TestCase):
    def test_revisions_are_git_blob_shas(self):
        store = InMemoryDocumentStore()
        sha = store.seed({"2024-01-01": {}})
        content = serialize_document({"2024-01-01": {}}).encode("utf-8")
        self.assertEqual(sha, blob_sha(content))
        self.assertEqual(store.current_revision(), sha)

    def test_every_write_is_kept_in_history(self):
        store = InMemoryDocumentStore()
        store.write({"2024-01-01": {}})
        store.write({"2024-01-01": {}, "2024-01-02": {}})
        self.assertEqual(len(store.history), 2)
        self.assertTrue(store.history[-1].message.startswith("Update drink records"))

    def test_stale_write_is_rejected(self):
        store = InMemoryDocumentStore()
        first = store.seed({"2024-01-01": {"bob": {"beer": 1}}})
        store.seed({"2024-01-01": {"bob": {"beer": 2}}})

        result = store.write_if_match({"2024-01-02": {}}, first)

        self.assertTrue(result.conflict)
        self.assertEqual(store.read(), {"2024-01-01": {"bob": {"beer": 2}}})

    def test_fresh_write_succeeds(self):
        store = InMemoryDocumentStore()
        current = store.seed({})
        result = store.write_if_match({"2024-01-02": {}}, current)
        self.assertTrue(result.ok)
        self.assertEqual(store.current_revision(), result.revision)

    def test_failure_injection_is_one_shot(self):
        store = InMemoryDocumentStore()
        store.fail_with = AuthError("expired")
        with self.assertRaises(AuthError):
            store.read()
        self.assertEqual(store.read(), {})


if __name__ == "__main__":
    unittest.main()
