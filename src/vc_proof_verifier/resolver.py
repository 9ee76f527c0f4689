"""
Verification method resolution.

Resolves a proof's ``verificationMethod`` to an Ed25519 ``publicKeyMultibase``
and, where the addressing scheme names one, the key's controller.

Accepted forms:
- ``<controller>#<publicKeyMultibase>``
- ``did:key:<publicKeyMultibase>``
- ``http(s)://`` location of an Ed25519VerificationKey2020 document
- ``http(s)://`` location of a controller document (e.g. a DID Document)
  with a ``verificationMethod`` holding an Ed25519VerificationKey2020
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from vc_proof_verifier.document_loader import DocumentLoader, HttpDocumentLoader
from vc_proof_verifier.multikey import is_valid_public_key_multibase
from vc_proof_verifier.outcome import FailedCheck, ProofCheckError

log = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):(.*)$", re.DOTALL)

DID_KEY_PREFIX = "key:"
HTTP_SCHEMES = ("http", "https")


class VerificationMethodError(ProofCheckError):
    """Raised when a verification method cannot be resolved to a key."""

    check = FailedCheck.METHOD_RESOLUTION


class ControllerMismatchError(ProofCheckError):
    """Raised when the key controller is not the credential issuer."""

    check = FailedCheck.CONTROLLER_MATCH


@dataclass(frozen=True)
class ResolvedKeyMaterial:
    """Key material a verification method resolved to."""

    public_key_multibase: str
    controller: str | None = None


@dataclass(frozen=True)
class FragmentKey:
    """``<controller>#<publicKeyMultibase>``."""

    uri: str
    controller: str
    public_key_multibase: str

    def key_material(self) -> ResolvedKeyMaterial:
        return ResolvedKeyMaterial(self.public_key_multibase, self.controller)


@dataclass(frozen=True)
class DidKey:
    """``did:key:<publicKeyMultibase>``. The DID names no separate controller."""

    uri: str
    public_key_multibase: str

    def key_material(self) -> ResolvedKeyMaterial:
        return ResolvedKeyMaterial(self.public_key_multibase)


@dataclass(frozen=True)
class RemoteDocument:
    """An HTTP(S) verification method whose document is not fetched yet."""

    uri: str


@dataclass(frozen=True)
class RemoteKeyDocument:
    """A fetched Ed25519VerificationKey2020 document."""

    uri: str
    controller: str
    public_key_multibase: str

    def key_material(self) -> ResolvedKeyMaterial:
        return ResolvedKeyMaterial(self.public_key_multibase, self.controller)


@dataclass(frozen=True)
class RemoteControllerDocument:
    """A fetched controller document carrying the key in ``verificationMethod``."""

    uri: str
    controller: str
    public_key_multibase: str

    def key_material(self) -> ResolvedKeyMaterial:
        return ResolvedKeyMaterial(self.public_key_multibase, self.controller)


VerificationMethodReference = Union[FragmentKey, DidKey, RemoteDocument]
ResolvedMethod = Union[FragmentKey, DidKey, RemoteKeyDocument, RemoteControllerDocument]


def classify_verification_method(uri: str | None) -> VerificationMethodReference:
    """Classify a verification method URI by its addressing form.

    Checked in order: a fragment holding a valid Ed25519 multikey, a missing
    scheme, ``did:key``, other DIDs, ``http(s)``, any other scheme.

    Raises:
        VerificationMethodError: If the URI has no scheme or an unsupported form.
    """
    if not isinstance(uri, str):
        uri = ""
    base, has_fragment, fragment = uri.partition("#")

    if has_fragment and is_valid_public_key_multibase(fragment):
        return FragmentKey(uri=uri, controller=base, public_key_multibase=fragment)

    match = _SCHEME_RE.match(base)
    if match is None:
        raise VerificationMethodError(
            "The verification method must be a valid URI (missing scheme)"
        )

    scheme, specific_part = match.groups()
    if scheme == "did":
        if specific_part.startswith(DID_KEY_PREFIX):
            return DidKey(
                uri=uri, public_key_multibase=specific_part[len(DID_KEY_PREFIX):]
            )
        raise VerificationMethodError(f"Unknown verification method: {uri}")

    if scheme in HTTP_SCHEMES:
        return RemoteDocument(uri=uri)

    raise VerificationMethodError(f"Unknown verification method scheme: {scheme}")


def classify_key_document(
    uri: str, document: Any
) -> RemoteKeyDocument | RemoteControllerDocument:
    """Classify a fetched document as a key document or a controller document.

    A document with a non-blank ``controller`` is a key document. Otherwise
    the key is taken from its ``verificationMethod``.

    Raises:
        VerificationMethodError: If neither form can be parsed.
    """
    cannot_parse = VerificationMethodError(f"Cannot parse key document from {uri}")
    if not isinstance(document, dict):
        raise cannot_parse

    controller = document.get("controller")
    if isinstance(controller, str) and controller.strip():
        public_key_multibase = document.get("publicKeyMultibase")
        if not isinstance(public_key_multibase, str):
            raise cannot_parse
        return RemoteKeyDocument(
            uri=uri, controller=controller, public_key_multibase=public_key_multibase
        )

    method = _select_verification_method(uri, document.get("verificationMethod"))
    if not method:
        raise cannot_parse

    controller = method.get("controller")
    public_key_multibase = method.get("publicKeyMultibase")
    if not isinstance(controller, str) or not isinstance(public_key_multibase, str):
        raise cannot_parse

    return RemoteControllerDocument(
        uri=uri, controller=controller, public_key_multibase=public_key_multibase
    )


def _select_verification_method(uri: str, methods: Any) -> dict[str, Any] | None:
    """Pick the verification method entry of a controller document.

    ``verificationMethod`` may be a single object or, as in DID Documents,
    a list; from a list the entry whose ``id`` is ``uri`` wins, and a
    single-entry list is used as-is.
    """
    if isinstance(methods, dict):
        return methods
    if isinstance(methods, list):
        entries = [m for m in methods if isinstance(m, dict)]
        for entry in entries:
            if entry.get("id") == uri:
                return entry
        if len(entries) == 1:
            return entries[0]
    return None


def match_controller(material: ResolvedKeyMaterial, issuer: str | None) -> None:
    """Check that the key's controller, if known, is the credential issuer.

    Raises:
        ControllerMismatchError: If the controller differs from the issuer.
    """
    if material.controller is None:
        log.debug("No key controller to match against issuer %s", issuer)
        return

    if material.controller != issuer:
        raise ControllerMismatchError(f"Key controller does not match issuer: {issuer}")


class VerificationMethodResolver:
    """Resolves verification method URIs to Ed25519 key material."""

    def __init__(self, document_loader: DocumentLoader | None = None) -> None:
        """Initialize the resolver.

        Args:
            document_loader: Loader for remote key and controller documents.
                An HttpDocumentLoader is created if not provided.
        """
        self.document_loader = document_loader or HttpDocumentLoader()

    def resolve(self, uri: str | None) -> ResolvedKeyMaterial:
        """Resolve a verification method to its key material.

        Args:
            uri: The proof's verificationMethod.

        Returns:
            The publicKeyMultibase and the controller, if the form names one.

        Raises:
            VerificationMethodError: If resolution fails.
        """
        return self.resolve_method(uri).key_material()

    def resolve_method(self, uri: str | None) -> ResolvedMethod:
        """Resolve a verification method to its fully classified form."""
        reference = classify_verification_method(uri)
        if isinstance(reference, RemoteDocument):
            document = self._load_document(reference.uri)
            resolved = classify_key_document(reference.uri, document)
        else:
            resolved = reference

        log.debug("Verification method %s resolved as %s", uri, type(resolved).__name__)
        return resolved

    def _load_document(self, uri: str) -> Any:
        """Fetch a key or controller document.

        Raises:
            VerificationMethodError: If the loader fails or finds nothing.
        """
        try:
            document = self.document_loader.load(uri, {})
        except Exception as e:
            raise VerificationMethodError(f"Invalid verification key URL: {e}") from e

        if document is None:
            raise VerificationMethodError(f"Key document not found at {uri}")

        return document
