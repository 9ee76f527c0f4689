"""
Ed25519Signature2020 proof verification.

Implements the verify algorithm of the Ed25519Signature2020 suite:
1. Proof options = proof without proofValue, with the document's @context
2. Canonicalize options and document (proof removed) with URDNA2015
3. Verify data = SHA-256(options) || SHA-256(document)
4. Verify the Ed25519 signature carried in the multibase proofValue

https://w3c-ccg.github.io/di-eddsa-2020/
"""

from __future__ import annotations

import hashlib
from typing import Any, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from pyld import jsonld

from vc_proof_verifier.credential import Proof
from vc_proof_verifier.document_loader import (
    DocumentLoader,
    HttpDocumentLoader,
    jsonld_document_loader,
)
from vc_proof_verifier.multikey import decode_multibase


class SignatureVerifier(Protocol):
    """Checks a proof's signature over a document with a raw public key."""

    def verify(self, public_key: bytes, proof: Proof, document: dict[str, Any]) -> bool:
        """Return True if the signature verifies, False if it does not.

        Raises on any failure that prevents verification from completing.
        """
        ...


class Ed25519Signature2020Verifier:
    """Signature verifier for the Ed25519Signature2020 cryptosuite."""

    def __init__(self, document_loader: DocumentLoader | None = None) -> None:
        """Initialize the verifier.

        Args:
            document_loader: Loader used for JSON-LD contexts during
                canonicalization. Created if not provided.
        """
        if document_loader is None:
            document_loader = HttpDocumentLoader()
        self.document_loader = document_loader

    def verify(self, public_key: bytes, proof: Proof, document: dict[str, Any]) -> bool:
        """Verify an Ed25519Signature2020 proof.

        Args:
            public_key: The raw 32-byte Ed25519 public key.
            proof: The proof to verify.
            document: The signed credential, including its proof.

        Returns:
            True if the signature is valid, False otherwise.
        """
        if not proof.proof_value:
            raise ValueError("Missing proofValue in proof")

        signature = decode_multibase(proof.proof_value)
        verify_data = self.create_verify_data(proof, document)

        key = Ed25519PublicKey.from_public_bytes(public_key)
        try:
            key.verify(signature, verify_data)
        except InvalidSignature:
            return False
        return True

    def create_verify_data(self, proof: Proof, document: dict[str, Any]) -> bytes:
        """Build the hashed data the signature is computed over."""
        unsigned_document = {k: v for k, v in document.items() if k != "proof"}

        proof_options = {k: v for k, v in proof.raw.items() if k != "proofValue"}
        proof_options["@context"] = document.get("@context")

        proof_hash = hashlib.sha256(self._canonicalize(proof_options)).digest()
        document_hash = hashlib.sha256(self._canonicalize(unsigned_document)).digest()
        return proof_hash + document_hash

    def _canonicalize(self, data: dict[str, Any]) -> bytes:
        """Canonicalize a JSON-LD document to N-Quads with URDNA2015."""
        normalized = jsonld.normalize(
            data,
            {
                "algorithm": "URDNA2015",
                "format": "application/n-quads",
                "documentLoader": jsonld_document_loader(self.document_loader),
            },
        )
        return normalized.encode("utf-8")
