"""
Credential and proof model.

Parses the parts of a Verifiable Credential the embedded proof check
needs (issuer, attached proofs) and selects the proof to verify.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from vc_proof_verifier.outcome import FailedCheck, ProofCheckError

log = logging.getLogger(__name__)

ED25519_SIGNATURE_2020 = "Ed25519Signature2020"
ASSERTION_METHOD = "assertionMethod"


class ProofSelectionError(ProofCheckError):
    """Raised when no usable proof is attached to the credential."""

    check = FailedCheck.PROOF_SELECTION


def _node_id(value: Any) -> str | None:
    """Return a node reference as a string: the value itself or an object's ``id``."""
    if isinstance(value, dict):
        value = value.get("id")
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class Proof:
    """An embedded Linked Data proof."""

    type: str | list[str] | None
    proof_purpose: str | None
    verification_method: str | None
    proof_value: str | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proof:
        """Create a Proof from its JSON object."""
        return cls(
            type=data.get("type"),
            proof_purpose=data.get("proofPurpose"),
            verification_method=_node_id(data.get("verificationMethod")),
            proof_value=data.get("proofValue"),
            raw=dict(data),
        )

    def is_type(self, proof_type: str) -> bool:
        """Check if the proof declares the given type."""
        if isinstance(self.type, list):
            return proof_type in self.type
        return self.type == proof_type


@dataclass(frozen=True)
class Credential:
    """A signed credential: its JSON payload, issuer and proofs."""

    json: dict[str, Any]
    issuer: str | None
    proofs: tuple[Proof, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credential:
        """Create a Credential from its JSON payload.

        ``issuer`` may be a string or an object with an ``id``; ``proof``
        may be a single object or a list of objects.
        """
        issuer = _node_id(data.get("issuer"))

        proof_data = data.get("proof") or []
        if not isinstance(proof_data, list):
            proof_data = [proof_data]

        proofs: list[Proof] = []
        for item in proof_data:
            if not isinstance(item, dict):
                log.debug("Ignoring non-object proof entry: %r", item)
                continue
            proofs.append(Proof.from_dict(item))

        return cls(json=data, issuer=issuer, proofs=tuple(proofs))


def select_proof(
    proofs: Sequence[Proof],
    proof_type: str = ED25519_SIGNATURE_2020,
    proof_purpose: str = ASSERTION_METHOD,
) -> Proof:
    """Return the first proof with the expected type and purpose.

    Args:
        proofs: The credential's proofs, in document order.
        proof_type: Required proof type.
        proof_purpose: Required proof purpose.

    Returns:
        The first matching proof.

    Raises:
        ProofSelectionError: If there are no proofs, or none match.
    """
    if not proofs:
        raise ProofSelectionError("The verifiable credential is missing a proof.")

    for proof in proofs:
        if proof.is_type(proof_type) and proof.proof_purpose == proof_purpose:
            return proof

    raise ProofSelectionError(
        f'No proof with type "{proof_type}" or proof purpose '
        f'"{proof_purpose}" found'
    )
