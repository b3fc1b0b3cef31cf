"""secp256k1 key pair satisfying the SigningKey / PublicKeyRef capabilities.

Only in-memory construction is offered here: wrap an existing key, load one
from PEM bytes, or generate a fresh one. Persisting keys is up to the caller.
"""

from __future__ import annotations

from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from bitpay_sdk.errors import ConfigurationError


class EcdsaPublicKey:
    def __init__(self, key: ec.EllipticCurvePublicKey) -> None:
        self._key = key

    def to_identity_string(self) -> str:
        """Hex of the compressed SEC1 point, as sent in ``x-identity``."""
        return self._key.public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.CompressedPoint,
        ).hex()

    def verify(self, signature: bytes, message: bytes) -> bool:
        try:
            self._key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True

    def __str__(self) -> str:
        return self.to_identity_string()

    def __repr__(self) -> str:
        return f"EcdsaPublicKey({self.to_identity_string()!r})"


class EcdsaPrivateKey:
    """ECDSA-SHA256 signer producing DER-encoded signatures."""

    def __init__(self, key: ec.EllipticCurvePrivateKey) -> None:
        if not isinstance(key.curve, ec.SECP256K1):
            raise ConfigurationError(f"expected a secp256k1 key, got {key.curve.name}")
        self._key = key

    @classmethod
    def generate(cls) -> "EcdsaPrivateKey":
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_pem(cls, data: bytes, password: Optional[bytes] = None) -> "EcdsaPrivateKey":
        try:
            key = serialization.load_pem_private_key(data, password=password)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"cannot load private key: {exc}") from exc
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise ConfigurationError("private key is not an elliptic-curve key")
        return cls(key)

    def sign(self, message: bytes) -> bytes:
        return self._key.sign(message, ec.ECDSA(hashes.SHA256()))

    def public_key(self) -> EcdsaPublicKey:
        return EcdsaPublicKey(self._key.public_key())

    def __repr__(self) -> str:
        # Never expose key material.
        return f"EcdsaPrivateKey(public={self.public_key().to_identity_string()!r})"
