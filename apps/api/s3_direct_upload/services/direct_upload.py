"""Pre-signed S3 POST credentials for browser-side multipart uploads.

The caller renders an HTML form whose ``action`` is ``url`` and whose hidden
inputs are ``credentials``; the browser then posts the file straight to S3.

See:
- https://docs.aws.amazon.com/AmazonS3/latest/API/sigv4-HTTPPOSTConstructPolicy.html
- https://docs.aws.amazon.com/AmazonS3/latest/API/sigv4-post-example.html
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from s3_direct_upload.config import DEFAULT_ACL
from s3_direct_upload.errors import ConfigurationError, EncodingError, InvalidSpecError
from s3_direct_upload.services.conditions import Condition, normalize_conditions
from s3_direct_upload.services.credentials import CredentialsProvider, CredentialsSnapshot, get_credentials_provider
from s3_direct_upload.services.date_util import DEFAULT_DATE_UTIL, Clock, DateUtil, as_utc, utc_now

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
DEFAULT_EXPIRATION = timedelta(hours=1)


@dataclass(frozen=True)
class UploadSpec:
    """Everything needed to presign one upload.

    ``bucket`` and ``filename`` are required. ``mimetype`` and ``path`` are
    used as ``starts-with`` prefixes and may be empty. ``expiration`` defaults
    to one hour after signing. ``additional_conditions`` are appended to the
    policy as given, e.g. ``[["content-length-range", 0, 50 * 1024 * 1024]]``.
    """

    filename: str
    mimetype: str | None
    path: str | None
    bucket: str
    acl: str = DEFAULT_ACL
    expiration: datetime | None = None
    additional_conditions: Sequence[Any] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.bucket:
            raise InvalidSpecError("bucket is required")
        if not self.filename:
            raise InvalidSpecError("filename is required")
        object.__setattr__(self, "additional_conditions", tuple(self.additional_conditions))

    @property
    def key(self) -> str:
        return f"{self.path or ''}/{self.filename}"


def credential_scope(credentials: CredentialsSnapshot, date_short: str) -> str:
    return f"{credentials.access_key_id}/{date_short}/{credentials.region}/{SERVICE}/aws4_request"


def upload_url(bucket: str, region: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com"


def build_conditions(
    spec: UploadSpec,
    *,
    credential: str,
    amz_date: str,
    security_token: str | None = None,
) -> list[Condition]:
    conditions: list[Condition] = [
        {"bucket": spec.bucket},
        {"acl": spec.acl or ""},
        {"x-amz-algorithm": ALGORITHM},
        {"x-amz-credential": credential},
        {"x-amz-date": amz_date},
        ["starts-with", "$Content-Type", spec.mimetype or ""],
        ["starts-with", "$key", spec.path or ""],
    ]
    if security_token is not None:
        conditions.append({"x-amz-security-token": security_token})
    conditions.extend(normalize_conditions(spec.additional_conditions))
    return conditions


def encode_policy(expiration: str, conditions: list[Condition]) -> str:
    """Serialize the policy document and return it base64 encoded.

    Key order is fixed (``expiration`` then ``conditions``) and the output is
    compact, so equal inputs always yield equal bytes.
    """
    document = {"expiration": expiration, "conditions": conditions}
    try:
        payload = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Policy conditions are not JSON encodable: {exc}") from exc
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_policy(policy: str) -> dict:
    return json.loads(base64.b64decode(policy))


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_access_key: str, date_short: str, region: str, service: str = SERVICE) -> bytes:
    if not secret_access_key:
        raise ConfigurationError("Secret access key is required to derive a signing key")
    k_date = _hmac_sha256(f"AWS4{secret_access_key}".encode("utf-8"), date_short)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    return _hmac_sha256(k_service, "aws4_request")


def sign_policy(signing_key: bytes, policy: str) -> str:
    return hmac.new(signing_key, policy.encode("utf-8"), hashlib.sha256).hexdigest()


def presigned(
    spec: UploadSpec,
    *,
    credentials_provider: CredentialsProvider | None = None,
    clock: Clock = utc_now,
    date_util: DateUtil = DEFAULT_DATE_UTIL,
) -> dict[str, Any]:
    """Return ``{"url": ..., "credentials": {...}}`` for ``spec``.

    ``credentials`` holds the hidden form fields: ``policy``,
    ``x-amz-algorithm``, ``x-amz-credential``, ``x-amz-date``,
    ``x-amz-signature``, ``acl``, ``key`` and, for temporary credentials,
    ``x-amz-security-token``.
    """
    provider = credentials_provider or get_credentials_provider()
    credentials = provider.resolve(SERVICE)
    now = as_utc(clock())

    amz_date = date_util.format_datetime(now)
    date_short = date_util.format_date(now.date())
    credential = credential_scope(credentials, date_short)
    expiration = spec.expiration if spec.expiration is not None else now + DEFAULT_EXPIRATION

    conditions = build_conditions(
        spec,
        credential=credential,
        amz_date=amz_date,
        security_token=credentials.security_token,
    )
    policy = encode_policy(date_util.format_expiration(expiration), conditions)
    signing_key = derive_signing_key(credentials.secret_access_key, date_short, credentials.region)

    fields: dict[str, str] = {
        "policy": policy,
        "x-amz-algorithm": ALGORITHM,
        "x-amz-credential": credential,
        "x-amz-date": amz_date,
        "x-amz-signature": sign_policy(signing_key, policy),
        "acl": spec.acl or "",
        "key": spec.key,
    }
    if credentials.security_token is not None:
        fields["x-amz-security-token"] = credentials.security_token

    logger.debug(
        "Presigned POST for s3://%s/%s (scope=%s, conditions=%d)",
        spec.bucket,
        spec.key,
        credential,
        len(conditions),
    )
    return {"url": upload_url(spec.bucket, credentials.region), "credentials": fields}


def presigned_json(
    spec: UploadSpec,
    *,
    credentials_provider: CredentialsProvider | None = None,
    clock: Clock = utc_now,
    date_util: DateUtil = DEFAULT_DATE_UTIL,
) -> str:
    envelope = presigned(spec, credentials_provider=credentials_provider, clock=clock, date_util=date_util)
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)
