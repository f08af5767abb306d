"""HMAC signing for ticket QR payloads and inbound webhook bodies.

Security:
    - Keys are derived from a configured secret with a domain-specific prefix,
      so the QR key and the webhook key never coincide with other uses of the secret.
    - Payloads are canonicalised (sorted keys, compact JSON) before signing.
    - Comparisons use hmac.compare_digest().
"""

import hashlib
import hmac
import typing as t

import orjson
from django.conf import settings

__all__ = [
    "TICKET_QR_DOMAIN",
    "PAYMENT_WEBHOOK_DOMAIN",
    "canonical_json",
    "sign_payload",
    "verify_payload",
    "sign_body",
    "verify_body",
]

TICKET_QR_DOMAIN = "clubhub:ticket-qr:v1"
PAYMENT_WEBHOOK_DOMAIN = "clubhub:payment-webhook:v1"


def _derive_key(domain: str, secret: str) -> bytes:
    # Simple domain separation: hash(domain || secret)
    return hashlib.sha256(f"{domain}:{secret}".encode()).digest()


def _secret_for(domain: str) -> str:
    if domain == PAYMENT_WEBHOOK_DOMAIN:
        return t.cast(str, settings.PAYMENT_WEBHOOK_SECRET)
    return t.cast(str, settings.TICKET_QR_SECRET)


def canonical_json(payload: dict[str, t.Any]) -> bytes:
    """Serialize a payload deterministically."""
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)


def sign_body(body: bytes, domain: str) -> str:
    """Return the hex HMAC-SHA256 of raw bytes under the domain's key."""
    return hmac.new(_derive_key(domain, _secret_for(domain)), body, hashlib.sha256).hexdigest()


def verify_body(body: bytes, signature: str | None, domain: str) -> bool:
    """Check a signature over raw bytes.

    An unset secret never verifies.
    """
    if not signature or not _secret_for(domain):
        return False
    return hmac.compare_digest(sign_body(body, domain), signature)


def sign_payload(payload: dict[str, t.Any], domain: str = TICKET_QR_DOMAIN) -> str:
    """Sign a JSON-compatible dict."""
    return sign_body(canonical_json(payload), domain)


def verify_payload(payload: dict[str, t.Any], signature: str | None, domain: str = TICKET_QR_DOMAIN) -> bool:
    """Check a signature produced by ``sign_payload``."""
    return verify_body(canonical_json(payload), signature, domain)
