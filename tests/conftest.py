"""Shared fixtures for VC Proof Verifier tests."""

import hashlib

import base58
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from pyld import jsonld

from vc_proof_verifier.document_loader import DocumentLoaderError
from vc_proof_verifier.multikey import encode_public_key

ISSUER = "https://issuer.example/controller"

# Inline context so canonicalization needs no remote documents
INLINE_CONTEXT = {
    "@vocab": "https://example.org/vocab#",
    "id": "@id",
    "type": "@type",
}


class StaticDocumentLoader:
    """In-memory document loader."""

    def __init__(self, documents=None, error=None):
        self.documents = documents or {}
        self.error = error
        self.requested = []

    def load(self, uri, options=None):
        self.requested.append(uri)
        if self.error is not None:
            raise self.error
        return self.documents.get(uri)


class FakeSignatureVerifier:
    """Signature primitive returning a fixed result or raising."""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def verify(self, public_key, proof, document):
        self.calls.append((public_key, proof, document))
        if self.error is not None:
            raise self.error
        return self.result


def _canonicalize(data):
    normalized = jsonld.normalize(
        data, {"algorithm": "URDNA2015", "format": "application/n-quads"}
    )
    return normalized.encode("utf-8")


@pytest.fixture
def ed25519_key_pair():
    """Generate a test Ed25519 key pair."""
    private_key = Ed25519PrivateKey.generate()
    public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return private_key, public_bytes


@pytest.fixture
def public_key_multibase(ed25519_key_pair):
    """The test public key as a z6Mk... multikey."""
    _, public_bytes = ed25519_key_pair
    return encode_public_key(public_bytes)


@pytest.fixture
def unsigned_credential():
    """A credential without proof."""
    return {
        "@context": INLINE_CONTEXT,
        "id": "urn:uuid:3f4a2c6e-0000-4000-8000-000000000001",
        "type": "VerifiableCredential",
        "issuer": ISSUER,
        "name": "Test Achievement",
    }


@pytest.fixture
def sign_credential():
    """Return a function that attaches an Ed25519Signature2020 proof."""

    def sign(credential, private_key, verification_method):
        proof = {
            "type": "Ed25519Signature2020",
            "created": "2025-01-15T10:00:00Z",
            "verificationMethod": verification_method,
            "proofPurpose": "assertionMethod",
        }
        proof_options = dict(proof)
        proof_options["@context"] = credential["@context"]
        verify_data = (
            hashlib.sha256(_canonicalize(proof_options)).digest()
            + hashlib.sha256(_canonicalize(credential)).digest()
        )
        signature = private_key.sign(verify_data)
        proof["proofValue"] = "z" + base58.b58encode(signature).decode("ascii")

        signed = dict(credential)
        signed["proof"] = proof
        return signed

    return sign


@pytest.fixture
def loader_error():
    return DocumentLoaderError("Network error loading https://example.org/key: timed out")
