"""
Embedded proof verifier.

Verifies the Ed25519Signature2020 proof embedded in a Verifiable Credential:
1. Select the proof with the expected type and purpose
2. Resolve its verification method to a publicKeyMultibase (and controller)
3. Decode the multibase to a raw Ed25519 public key
4. Check the key controller against the credential issuer
5. Verify the signature

The first failing step ends the run; its reason is the one reported.
"""

from __future__ import annotations

import logging
from typing import Any

from vc_proof_verifier.credential import (
    ASSERTION_METHOD,
    ED25519_SIGNATURE_2020,
    Credential,
    select_proof,
)
from vc_proof_verifier.document_loader import DocumentLoader, HttpDocumentLoader
from vc_proof_verifier.multikey import KeyTypeError, MultikeyError, decode_public_key
from vc_proof_verifier.outcome import (
    FailedCheck,
    ProofCheckError,
    VerificationOutcome,
)
from vc_proof_verifier.resolver import (
    ResolvedKeyMaterial,
    VerificationMethodResolver,
    match_controller,
)
from vc_proof_verifier.signature import Ed25519Signature2020Verifier, SignatureVerifier

log = logging.getLogger(__name__)


class EmbeddedProofVerifier:
    """Verifies a credential's embedded Ed25519Signature2020 proof."""

    def __init__(
        self,
        document_loader: DocumentLoader | None = None,
        signature_verifier: SignatureVerifier | None = None,
        proof_type: str = ED25519_SIGNATURE_2020,
        proof_purpose: str = ASSERTION_METHOD,
    ) -> None:
        """Initialize the verifier.

        Args:
            document_loader: Loader for remote key documents and JSON-LD contexts.
                Created if not provided.
            signature_verifier: Signature primitive. An Ed25519Signature2020Verifier
                sharing the document loader is created if not provided.
            proof_type: Proof type to select.
            proof_purpose: Proof purpose to select.
        """
        if document_loader is None:
            document_loader = HttpDocumentLoader()
        self.document_loader = document_loader
        self.resolver = VerificationMethodResolver(document_loader)
        if signature_verifier is None:
            signature_verifier = Ed25519Signature2020Verifier(document_loader)
        self.signature_verifier = signature_verifier
        self.proof_type = proof_type
        self.proof_purpose = proof_purpose

    def run(self, credential: Credential) -> VerificationOutcome:
        """Verify the credential's embedded proof.

        Args:
            credential: The credential to verify.

        Returns:
            Success, Rejected with the failing check's reason, or Fatal if
            the signature check itself could not complete.
        """
        verification_method: str | None = None
        material: ResolvedKeyMaterial | None = None

        try:
            proof = select_proof(credential.proofs, self.proof_type, self.proof_purpose)
            verification_method = proof.verification_method
            material = self.resolver.resolve(verification_method)
            public_key = self._decode_key(material.public_key_multibase)
            match_controller(material, credential.issuer)
        except ProofCheckError as e:
            log.debug("Embedded proof rejected (%s): %s", e.check.value, e)
            return VerificationOutcome.rejected(
                e.check,
                str(e),
                verification_method=verification_method,
                controller=material.controller if material else None,
            )

        try:
            verified = self.signature_verifier.verify(public_key, proof, credential.json)
        except Exception as e:
            log.warning("Embedded proof verification error: %s", e, exc_info=True)
            return VerificationOutcome.fatal(
                FailedCheck.SIGNATURE,
                f"Embedded proof verification failed: {e}",
                verification_method=verification_method,
                controller=material.controller,
            )

        if not verified:
            log.debug("Embedded proof signature did not verify")
            return VerificationOutcome.rejected(
                FailedCheck.SIGNATURE,
                "Embedded proof verification failed.",
                verification_method=verification_method,
                controller=material.controller,
            )

        return VerificationOutcome.success(
            verification_method=verification_method,
            controller=material.controller,
        )

    def _decode_key(self, public_key_multibase: str) -> bytes:
        """Decode the resolved multikey to raw Ed25519 public key bytes.

        Raises:
            ProofCheckError: If the value is not a well-formed Ed25519 multikey.
        """
        try:
            return decode_public_key(public_key_multibase).raw_bytes
        except KeyTypeError as e:
            raise ProofCheckError(
                "Verification method does not contain an Ed25519 public key",
                FailedCheck.KEY_DECODING,
            ) from e
        except MultikeyError as e:
            raise ProofCheckError(
                f"Invalid public key: {e}", FailedCheck.KEY_DECODING
            ) from e


def verify_credential(
    credential: dict[str, Any],
    document_loader: DocumentLoader | None = None,
) -> VerificationOutcome:
    """Convenience function to verify a credential's embedded proof.

    Args:
        credential: The credential JSON.
        document_loader: Optional loader for remote key documents.

    Returns:
        The verification outcome.
    """
    verifier = EmbeddedProofVerifier(document_loader=document_loader)
    return verifier.run(Credential.from_dict(credential))
