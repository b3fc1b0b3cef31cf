"""Identity and signature headers for authenticated BitPay requests.

A signed request carries ``x-identity`` (the caller's public key) and
``x-signature`` (hex of ``sign(full_uri + body)``). Signing the full URI, query
string included, ties the signature to the exact resource being addressed.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol, runtime_checkable

from bitpay_sdk.errors import ConfigurationError
from bitpay_sdk.request import AuthMode, Request

IDENTITY_HEADER = "x-identity"
SIGNATURE_HEADER = "x-signature"


@runtime_checkable
class SigningKey(Protocol):
    def sign(self, message: bytes) -> bytes:
        ...


@runtime_checkable
class PublicKeyRef(Protocol):
    def to_identity_string(self) -> str:
        ...


def signature_message(request: Request) -> bytes:
    """UTF-8 full URI immediately followed by the raw body."""
    return request.full_uri.encode("utf-8") + request.body


def build_auth_headers(
    request: Request,
    identity: Optional[PublicKeyRef] = None,
    signing_key: Optional[SigningKey] = None,
) -> Dict[str, str]:
    """Return the identity/signature headers *request* needs.

    REQUIRED requests fail with ConfigurationError when either capability is
    missing. OPTIONAL requests go unsigned only when neither is configured;
    a half-configured key pair is an error either way.
    """
    if request.auth is AuthMode.NONE:
        return {}
    if request.auth is AuthMode.OPTIONAL and identity is None and signing_key is None:
        return {}
    if identity is None:
        raise ConfigurationError(
            "no public key set: a public key is required before the x-identity header can be added"
        )
    if signing_key is None:
        raise ConfigurationError("no private key set: a private key is required to sign requests")

    signature = signing_key.sign(signature_message(request))
    return {
        IDENTITY_HEADER: identity.to_identity_string(),
        SIGNATURE_HEADER: signature.hex(),
    }
