"""Tests for the HTTP document loader."""

import httpx
import pytest
import respx
from httpx import Response

from conftest import StaticDocumentLoader
from vc_proof_verifier.document_loader import (
    DocumentLoaderError,
    HttpDocumentLoader,
    jsonld_document_loader,
)

KEY_URL = "https://example.org/keys/1"
KEY_DOCUMENT = {"id": KEY_URL, "controller": "https://issuer.example"}


class TestHttpDocumentLoader:
    """Tests for HttpDocumentLoader."""

    @respx.mock
    def test_load(self):
        """Test loading a JSON document."""
        route = respx.get(KEY_URL).mock(return_value=Response(200, json=KEY_DOCUMENT))

        document = HttpDocumentLoader().load(KEY_URL)

        assert document == KEY_DOCUMENT
        assert "application/ld+json" in route.calls.last.request.headers["Accept"]

    @respx.mock
    def test_cache(self):
        """Test that documents are fetched once per loader."""
        route = respx.get(KEY_URL).mock(return_value=Response(200, json=KEY_DOCUMENT))
        loader = HttpDocumentLoader()

        loader.load(KEY_URL)
        loader.load(KEY_URL)
        assert route.call_count == 1

        loader.load(KEY_URL, {"use_cache": False})
        assert route.call_count == 2

        loader.clear_cache()
        loader.load(KEY_URL)
        assert route.call_count == 3

    @respx.mock
    def test_fragment_ignored(self):
        """Test that the fragment is not part of the fetched URL."""
        route = respx.get(KEY_URL).mock(return_value=Response(200, json=KEY_DOCUMENT))

        assert HttpDocumentLoader().load(f"{KEY_URL}#key-1") == KEY_DOCUMENT
        assert route.called

    @respx.mock
    def test_not_found(self):
        """Test that 404 means the document is absent."""
        respx.get(KEY_URL).mock(return_value=Response(404))
        assert HttpDocumentLoader().load(KEY_URL) is None

    @respx.mock
    def test_server_error(self):
        respx.get(KEY_URL).mock(return_value=Response(500))
        with pytest.raises(DocumentLoaderError, match="500"):
            HttpDocumentLoader().load(KEY_URL)

    @respx.mock
    def test_timeout(self):
        """Test that timeouts surface as loader errors."""
        respx.get(KEY_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
        with pytest.raises(DocumentLoaderError, match="Network error"):
            HttpDocumentLoader(timeout=1.0).load(KEY_URL)

    @respx.mock
    def test_invalid_json(self):
        respx.get(KEY_URL).mock(return_value=Response(200, content=b"<html></html>"))
        with pytest.raises(DocumentLoaderError, match="Invalid JSON"):
            HttpDocumentLoader().load(KEY_URL)

    @respx.mock
    def test_local_documents(self):
        """Test that pre-loaded documents are served without network access."""
        route = respx.get(KEY_URL).mock(return_value=Response(500))
        loader = HttpDocumentLoader(local_documents={KEY_URL: KEY_DOCUMENT})

        assert loader.load(f"{KEY_URL}#key-1") == KEY_DOCUMENT
        assert not route.called

    def test_non_http_uri(self):
        with pytest.raises(DocumentLoaderError, match="non-HTTP"):
            HttpDocumentLoader().load("urn:uuid:1234")


class TestJsonLdLoader:
    """Tests for the PyLD document loader adapter."""

    def test_remote_document_shape(self):
        loader = jsonld_document_loader(
            HttpDocumentLoader(local_documents={KEY_URL: KEY_DOCUMENT})
        )

        remote = loader(KEY_URL, {})

        assert remote == {"contextUrl": None, "documentUrl": KEY_URL, "document": KEY_DOCUMENT}

    @respx.mock
    def test_missing_document(self):
        respx.get(KEY_URL).mock(return_value=Response(404))
        loader = jsonld_document_loader(HttpDocumentLoader())

        with pytest.raises(DocumentLoaderError, match="not found"):
            loader(KEY_URL, {})

    def test_any_document_loader(self):
        """Test that loaders other than HttpDocumentLoader can be adapted."""
        static = StaticDocumentLoader({KEY_URL: KEY_DOCUMENT})

        remote = jsonld_document_loader(static)(KEY_URL)

        assert remote["document"] == KEY_DOCUMENT
        assert static.requested == [KEY_URL]
