"""
VC Proof Verifier - embedded proof verification for Verifiable Credentials.

Supports:
- Ed25519Signature2020 proofs with proof purpose assertionMethod
- Verification methods as <controller>#<publicKeyMultibase>, did:key,
  or HTTP(S) key and controller documents
- Key controller / issuer matching
"""

from vc_proof_verifier.credential import Credential, Proof, select_proof
from vc_proof_verifier.document_loader import (
    DocumentLoader,
    DocumentLoaderError,
    HttpDocumentLoader,
)
from vc_proof_verifier.multikey import (
    KeyTypeError,
    MultikeyError,
    decode_public_key,
    encode_public_key,
)
from vc_proof_verifier.outcome import FailedCheck, OutcomeStatus, VerificationOutcome
from vc_proof_verifier.resolver import ResolvedKeyMaterial, VerificationMethodResolver
from vc_proof_verifier.signature import Ed25519Signature2020Verifier
from vc_proof_verifier.verifier import EmbeddedProofVerifier, verify_credential

__version__ = "0.1.0"

__all__ = [
    "Credential",
    "Proof",
    "select_proof",
    "DocumentLoader",
    "DocumentLoaderError",
    "HttpDocumentLoader",
    "KeyTypeError",
    "MultikeyError",
    "decode_public_key",
    "encode_public_key",
    "FailedCheck",
    "OutcomeStatus",
    "VerificationOutcome",
    "ResolvedKeyMaterial",
    "VerificationMethodResolver",
    "Ed25519Signature2020Verifier",
    "EmbeddedProofVerifier",
    "verify_credential",
]
