"""
Tests for BlobTransfer: redirect-following download and two-phase upload.
"""
from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from notary_registry.storage.blobs import BlobTransfer
from notary_registry.storage.descriptor import compute_digest
from notary_registry.storage.oci_errors import (
    OciAuthError,
    OciNotFound,
    OciProtocolError,
    OciRedirectError,
    OciTooLarge,
    OciUploadCommitError,
    OciUploadInitError,
)

from tests.conftest import BASE_URL, REPO_NAME
from tests.storage.fakes import STORAGE_HOST

DATA = b"sig-bytes"
DIGEST = compute_digest(DATA)


def _scripted(handler: Callable[[httpx.Request], httpx.Response]):
    """Client that records requests and answers with ``handler``."""
    seen: List[httpx.Request] = []

    def record(request):
        seen.append(request)
        return handler(request)

    return httpx.Client(transport=httpx.MockTransport(record)), seen


@pytest.fixture
def blobs(client):
    return BlobTransfer(client, BASE_URL, REPO_NAME)


class TestDownload:
    """Test blob download."""

    def test_direct_download(self, fake_registry, blobs):
        fake_registry.seed_blob(REPO_NAME, DATA)

        assert blobs.download(DIGEST) == DATA
        request = fake_registry.requests[-1]
        assert request.method == "GET"
        assert str(request.url) == f"{BASE_URL}/{REPO_NAME}/blobs/{DIGEST}"

    def test_follows_one_redirect(self, fake_registry, blobs):
        fake_registry.seed_blob(REPO_NAME, DATA)
        fake_registry.redirect_blobs = True

        assert blobs.download(DIGEST) == DATA
        assert len(fake_registry.requests) == 2
        follow_up = fake_registry.requests[1]
        assert follow_up.url.host == STORAGE_HOST
        assert follow_up.url.params["sig"] == "xyz"

    def test_second_redirect_is_not_followed(self):
        def handler(request):
            if request.url.host == "storage.example.com":
                return httpx.Response(307, headers={"Location": "https://elsewhere.example.com/b"})
            return httpx.Response(307, headers={"Location": "https://storage.example.com/b"})

        client, seen = _scripted(handler)
        with client:
            with pytest.raises(OciRedirectError) as exc_info:
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)

        assert exc_info.value.status_code == 307
        assert [r.url.host for r in seen] == ["registry.example.com", "storage.example.com"]

    def test_redirect_without_location(self):
        client, seen = _scripted(lambda request: httpx.Response(307))
        with client:
            with pytest.raises(OciRedirectError, match="usable Location"):
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)
        assert len(seen) == 1

    def test_redirect_with_malformed_location(self):
        client, seen = _scripted(lambda request: httpx.Response(307, headers={"Location": "http://[::1"}))
        with client:
            with pytest.raises(OciRedirectError, match="usable Location") as exc_info:
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)
        assert exc_info.value.status_code == 307
        assert len(seen) == 1

    def test_redirect_target_failure(self):
        def handler(request):
            if request.url.host == "storage.example.com":
                return httpx.Response(403)
            return httpx.Response(307, headers={"Location": "https://storage.example.com/b"})

        client, _ = _scripted(handler)
        with client:
            with pytest.raises(OciAuthError):
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)

    def test_missing_blob(self, blobs):
        with pytest.raises(OciNotFound) as exc_info:
            blobs.download(DIGEST)
        assert exc_info.value.operation == "get blob"

    def test_unexpected_status(self):
        client, _ = _scripted(lambda request: httpx.Response(500))
        with client:
            with pytest.raises(OciProtocolError) as exc_info:
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)
        assert exc_info.value.status_code == 500

    def test_other_redirect_codes_are_failures(self):
        client, seen = _scripted(lambda request: httpx.Response(302, headers={"Location": "https://x/b"}))
        with client:
            with pytest.raises(OciProtocolError):
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)
        assert len(seen) == 1

    def test_oversized_blob_fails_instead_of_truncating(self, fake_registry, client):
        fake_registry.seed_blob(REPO_NAME, DATA)
        blobs = BlobTransfer(client, BASE_URL, REPO_NAME, max_read_bytes=len(DATA) - 1)

        with pytest.raises(OciTooLarge):
            blobs.download(DIGEST)

    def test_oversized_redirected_blob_fails(self, fake_registry, client):
        fake_registry.seed_blob(REPO_NAME, DATA)
        fake_registry.redirect_blobs = True
        blobs = BlobTransfer(client, BASE_URL, REPO_NAME, max_read_bytes=4)

        with pytest.raises(OciTooLarge):
            blobs.download(DIGEST)

    def test_invalid_digest_makes_no_request(self, fake_registry, blobs):
        with pytest.raises(ValueError):
            blobs.download("not a digest")
        assert fake_registry.requests == []

    def test_transport_error_surfaces_verbatim(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = _scripted(handler)
        with client:
            with pytest.raises(httpx.ConnectError):
                BlobTransfer(client, BASE_URL, REPO_NAME).download(DIGEST)


class TestUpload:
    """Test two-phase monolithic upload."""

    def test_upload_commits_blob(self, fake_registry, blobs):
        assert blobs.upload(DATA, DIGEST) == DIGEST
        assert fake_registry.blobs[(REPO_NAME, DIGEST)] == DATA

    def test_upload_wire_exchange(self, fake_registry, blobs):
        blobs.upload(DATA, DIGEST)

        init, commit = fake_registry.requests
        assert init.method == "POST"
        assert str(init.url) == f"{BASE_URL}/{REPO_NAME}/blobs/uploads/"

        assert commit.method == "PUT"
        assert commit.url.params["digest"] == DIGEST
        # Session state from the Location header is preserved
        assert commit.url.params["_state"] == "abc"
        assert commit.headers["Content-Type"] == "application/octet-stream"
        assert commit.content == DATA

    def test_empty_blob(self, fake_registry, blobs):
        digest = compute_digest(b"")
        blobs.upload(b"", digest)
        assert fake_registry.blobs[(REPO_NAME, digest)] == b""

    def test_missing_location_fails_before_commit(self, fake_registry, blobs):
        fake_registry.omit_upload_location = True

        with pytest.raises(OciUploadInitError, match="no usable Location"):
            blobs.upload(DATA, DIGEST)

        assert len(fake_registry.requests_to("POST", "/blobs/uploads/")) == 1
        assert fake_registry.requests_to("PUT", "/blobs/uploads/") == []

    def test_malformed_location_fails_before_commit(self):
        client, seen = _scripted(lambda request: httpx.Response(202, headers={"Location": "http://[::1"}))
        with client:
            with pytest.raises(OciUploadInitError, match="no usable Location") as exc_info:
                BlobTransfer(client, BASE_URL, REPO_NAME).upload(DATA, DIGEST)
        assert exc_info.value.status_code == 202
        assert [r.method for r in seen] == ["POST"]

    def test_init_rejected(self):
        client, seen = _scripted(lambda request: httpx.Response(500))
        with client:
            with pytest.raises(OciUploadInitError) as exc_info:
                BlobTransfer(client, BASE_URL, REPO_NAME).upload(DATA, DIGEST)
        assert exc_info.value.status_code == 500
        assert len(seen) == 1

    def test_init_unauthorized(self):
        client, _ = _scripted(lambda request: httpx.Response(401))
        with client:
            with pytest.raises(OciAuthError):
                BlobTransfer(client, BASE_URL, REPO_NAME).upload(DATA, DIGEST)

    def test_commit_rejected_by_digest_check(self, blobs):
        with pytest.raises(OciUploadCommitError) as exc_info:
            blobs.upload(DATA, compute_digest(b"something else"))
        assert exc_info.value.status_code == 400

    def test_commit_requires_created_status(self):
        def handler(request):
            if request.method == "POST":
                return httpx.Response(202, headers={"Location": "https://registry.example.com/up/1"})
            return httpx.Response(202)

        client, seen = _scripted(handler)
        with client:
            with pytest.raises(OciUploadCommitError):
                BlobTransfer(client, BASE_URL, REPO_NAME).upload(DATA, DIGEST)
        assert [r.method for r in seen] == ["POST", "PUT"]
        assert seen[1].url.path == "/up/1"
        assert seen[1].url.params["digest"] == DIGEST
