from s3_direct_upload.services.conditions import content_length_range, exact, normalize_condition, starts_with
from s3_direct_upload.services.credentials import (
    BotoCredentialsProvider,
    CredentialsProvider,
    CredentialsSnapshot,
    EnvCredentialsProvider,
    StaticCredentialsProvider,
    get_credentials_provider,
)
from s3_direct_upload.services.date_util import DateUtil, UtcDateUtil, utc_now
from s3_direct_upload.services.direct_upload import (
    UploadSpec,
    build_conditions,
    credential_scope,
    decode_policy,
    derive_signing_key,
    encode_policy,
    presigned,
    presigned_json,
    sign_policy,
    upload_url,
)

__all__ = [
    "UploadSpec",
    "presigned",
    "presigned_json",
    "build_conditions",
    "encode_policy",
    "decode_policy",
    "derive_signing_key",
    "sign_policy",
    "credential_scope",
    "upload_url",
    "exact",
    "starts_with",
    "content_length_range",
    "normalize_condition",
    "CredentialsProvider",
    "CredentialsSnapshot",
    "StaticCredentialsProvider",
    "EnvCredentialsProvider",
    "BotoCredentialsProvider",
    "get_credentials_provider",
    "DateUtil",
    "UtcDateUtil",
    "utc_now",
]
