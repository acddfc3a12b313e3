"""
Webhook signature checks.

Dodo Payments follows Standard Webhooks: HMAC-SHA256 over
"{webhook-id}.{webhook-timestamp}.{body}" keyed with the base64 part of a
"whsec_" secret; the header carries space separated "v1,<base64 sig>" entries.

Paddle sends "ts=<unix>;h1=<hex sig>" with a hex HMAC-SHA256 of the body.
"""
import base64
import binascii
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)


def _decode_standard_secret(secret: str) -> bytes:
    key = secret[len("whsec_"):] if secret.startswith("whsec_") else secret
    return base64.b64decode(key)


def sign_standard_webhook(payload: str, webhook_id: str, timestamp: str, secret: str) -> str:
    signed_content = f"{webhook_id}.{timestamp}.{payload}".encode("utf-8")
    digest = hmac.new(_decode_standard_secret(secret), signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_standard_webhook(payload: str, webhook_id: str, timestamp: str, signature_header: str, secret: str) -> bool:
    if not signature_header:
        return False
    try:
        expected = sign_standard_webhook(payload, webhook_id, timestamp, secret)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Webhook secret is not valid base64: {str(e)}")
        return False
    for entry in signature_header.split(" "):
        version, _, signature = entry.partition(",")
        if version == "v1" and hmac.compare_digest(signature, expected):
            return True
    return False


def sign_paddle_payload(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_paddle_signature(payload: str, signature_header: str, secret: str) -> bool:
    if not signature_header:
        return False
    h1 = ""
    for part in signature_header.split(";"):
        if part.startswith("h1="):
            h1 = part[3:]
            break
    if not h1:
        return False
    return hmac.compare_digest(h1, sign_paddle_payload(payload, secret))
