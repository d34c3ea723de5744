"""AWS Signature Version 4 request signing.

Only what the model invocation endpoint needs is implemented: a single
request with an empty query string, signed over ``content-type``, ``host`` and
``x-amz-date``. Every intermediate value is kept on :class:`SigningContext` so
each step can be checked against published AWS examples.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Dict, Mapping

ALGORITHM = "AWS4-HMAC-SHA256"
TERMINATOR = "aws4_request"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"


@dataclass(frozen=True)
class SigningContext:
    """Every value produced while signing one request."""

    amz_date: str
    date_stamp: str
    payload_hash: str
    canonical_request: str
    credential_scope: str
    string_to_sign: str
    signing_key: bytes
    signature: str
    signed_headers: str
    authorization_header: str

    def headers(self) -> Dict[str, str]:
        """Headers that carry the signature on the outgoing request."""
        return {"X-Amz-Date": self.amz_date, "Authorization": self.authorization_header}


def format_amz_date(timestamp: datetime) -> str:
    """Return ``YYYYMMDD'T'HHMMSS'Z'`` in UTC; naive timestamps are taken as UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC).strftime(AMZ_DATE_FORMAT)


def sha256_hex(data: str | bytes) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Run the date/region/service/terminator HMAC chain."""
    k_date = hmac_sha256(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, TERMINATOR)


def canonical_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """Return ``(canonical header block, signed header list)``."""
    normalised = sorted((name.strip().lower(), " ".join(value.split())) for name, value in headers.items())
    block = "".join(f"{name}:{value}\n" for name, value in normalised)
    signed = ";".join(name for name, _ in normalised)
    return block, signed


def sign_headers(
    *,
    method: str,
    uri: str,
    headers: Mapping[str, str],
    payload: str | bytes,
    amz_date: str,
    region: str,
    service: str,
    secret_key: str,
    access_key_id: str,
    query: str = "",
) -> SigningContext:
    """Sign a request whose headers (including ``x-amz-date``) are already known."""
    date_stamp = amz_date[:8]
    payload_hash = sha256_hex(payload)
    header_block, signed_headers = canonical_headers(headers)

    canonical_request = "\n".join(
        [method.upper(), uri, query, header_block, signed_headers, payload_hash]
    )
    credential_scope = f"{date_stamp}/{region}/{service}/{TERMINATOR}"
    string_to_sign = "\n".join(
        [ALGORITHM, amz_date, credential_scope, sha256_hex(canonical_request)]
    )
    signing_key = derive_signing_key(secret_key, date_stamp, region, service)
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()
    authorization = (
        f"{ALGORITHM} Credential={access_key_id}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )
    return SigningContext(
        amz_date=amz_date,
        date_stamp=date_stamp,
        payload_hash=payload_hash,
        canonical_request=canonical_request,
        credential_scope=credential_scope,
        string_to_sign=string_to_sign,
        signing_key=signing_key,
        signature=signature,
        signed_headers=signed_headers,
        authorization_header=authorization,
    )


def sign(
    *,
    uri: str,
    host: str,
    region: str,
    service: str,
    secret_key: str,
    access_key_id: str,
    payload: str | bytes,
    timestamp: datetime,
    method: str = "POST",
    content_type: str = "application/json",
) -> SigningContext:
    """Sign a request over ``content-type;host;x-amz-date`` with an empty query string."""
    amz_date = format_amz_date(timestamp)
    headers = {"content-type": content_type, "host": host, "x-amz-date": amz_date}
    return sign_headers(
        method=method,
        uri=uri,
        headers=headers,
        payload=payload,
        amz_date=amz_date,
        region=region,
        service=service,
        secret_key=secret_key,
        access_key_id=access_key_id,
    )


__all__ = [
    "ALGORITHM",
    "SigningContext",
    "canonical_headers",
    "derive_signing_key",
    "format_amz_date",
    "sign",
    "sign_headers",
]
