"""
Document loader for key documents, controller documents and JSON-LD contexts.

Fetches JSON documents over HTTP(S). Pre-loaded documents can be supplied
per URI so that static key documents and contexts resolve offline.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol
from urllib.parse import urldefrag

import httpx

log = logging.getLogger(__name__)

ABSENT_STATUS_CODES = {404, 410}


class DocumentLoaderError(Exception):
    """Raised when a document cannot be loaded."""


class DocumentLoader(Protocol):
    """Loads a structured JSON document by URI."""

    def load(
        self, uri: str, options: Mapping[str, Any] | None = None
    ) -> Any | None:
        """Return the document at ``uri``, or ``None`` if there is none.

        Raises:
            DocumentLoaderError: If the document cannot be retrieved.
        """
        ...


def jsonld_document_loader(
    loader: DocumentLoader,
) -> Callable[[str, dict[str, Any] | None], dict[str, Any]]:
    """Adapt a document loader to the PyLD ``documentLoader`` callable.

    A missing document raises ``DocumentLoaderError``.
    """

    def load_remote_document(
        url: str, options: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        document = loader.load(url)
        if document is None:
            raise DocumentLoaderError(f"Document not found: {url}")
        return {
            "contextUrl": None,
            "documentUrl": url,
            "document": document,
        }

    return load_remote_document


class HttpDocumentLoader:
    """Document loader backed by httpx."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        local_documents: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the document loader.

        Args:
            timeout: HTTP request timeout in seconds.
            verify_ssl: Whether to verify SSL certificates.
            local_documents: Documents served by URI without network access.
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.local_documents = {
            urldefrag(uri).url: doc for uri, doc in (local_documents or {}).items()
        }
        self._cache: dict[str, Any] = {}

    def load(
        self, uri: str, options: Mapping[str, Any] | None = None
    ) -> Any | None:
        """Load the JSON document at a URI.

        Args:
            uri: Document URI. Any fragment is ignored.
            options: Loader options. ``use_cache`` (default True) controls caching.

        Returns:
            The parsed JSON document, or None if the server reports it absent.

        Raises:
            DocumentLoaderError: On HTTP, network or JSON errors.
        """
        url = urldefrag(uri).url
        use_cache = (options or {}).get("use_cache", True)

        if url in self.local_documents:
            return self.local_documents[url]

        if use_cache and url in self._cache:
            return self._cache[url]

        if not url.startswith(("http://", "https://")):
            raise DocumentLoaderError(f"Cannot load non-HTTP document: {uri}")

        log.debug("Fetching document %s", url)
        try:
            with httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
            ) as client:
                response = client.get(
                    url,
                    headers={"Accept": "application/ld+json, application/json"},
                )
                if response.status_code in ABSENT_STATUS_CODES:
                    log.debug("No document at %s (%s)", url, response.status_code)
                    return None
                response.raise_for_status()
                document = response.json()

        except httpx.HTTPStatusError as e:
            raise DocumentLoaderError(
                f"HTTP error loading {url}: {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise DocumentLoaderError(f"Network error loading {url}: {e}") from e
        except ValueError as e:
            raise DocumentLoaderError(f"Invalid JSON in document at {url}") from e

        if use_cache:
            self._cache[url] = document

        return document

    def clear_cache(self) -> None:
        """Clear the document cache."""
        self._cache.clear()
