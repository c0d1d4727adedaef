"""Pre-signed S3 POST credentials for direct browser uploads.

Example::

    from s3_direct_upload import UploadSpec, presigned

    envelope = presigned(
        UploadSpec(
            filename="${filename}",
            mimetype="image/jpeg",
            path="some/path/somewhere",
            bucket="my-bucket",
            additional_conditions=[["content-length-range", 0, 50 * 1024 * 1024]],
        )
    )
    envelope["url"]          # form action
    envelope["credentials"]  # hidden input fields
"""

from s3_direct_upload.errors import ConfigurationError, DirectUploadError, EncodingError, InvalidSpecError
from s3_direct_upload.services.credentials import (
    BotoCredentialsProvider,
    CredentialsSnapshot,
    EnvCredentialsProvider,
    StaticCredentialsProvider,
)
from s3_direct_upload.services.direct_upload import UploadSpec, presigned, presigned_json

__all__ = [
    "UploadSpec",
    "presigned",
    "presigned_json",
    "CredentialsSnapshot",
    "StaticCredentialsProvider",
    "EnvCredentialsProvider",
    "BotoCredentialsProvider",
    "DirectUploadError",
    "ConfigurationError",
    "InvalidSpecError",
    "EncodingError",
]
