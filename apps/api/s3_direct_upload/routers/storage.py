import logging
from datetime import timedelta

from fastapi import APIRouter, HTTPException, status

from s3_direct_upload.config import get_s3_bucket, get_s3_upload_acl, get_s3_upload_expires_in_sec
from s3_direct_upload.errors import ConfigurationError, EncodingError, InvalidSpecError
from s3_direct_upload.schemas.upload import S3PresignPostRequest, S3PresignPostResponse
from s3_direct_upload.services.date_util import utc_now
from s3_direct_upload.services.direct_upload import UploadSpec, presigned

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])


@router.post("/s3/presign-post", response_model=S3PresignPostResponse)
def presign_s3_post(payload: S3PresignPostRequest) -> S3PresignPostResponse:
    now = utc_now()
    expires_in_sec = payload.expires_in_sec or get_s3_upload_expires_in_sec()
    try:
        spec = UploadSpec(
            filename=payload.filename,
            mimetype=payload.content_type,
            path=payload.path,
            bucket=payload.bucket or get_s3_bucket() or "",
            acl=payload.acl or get_s3_upload_acl(),
            expiration=now + timedelta(seconds=expires_in_sec),
            additional_conditions=payload.additional_conditions,
        )
        envelope = presigned(spec, clock=lambda: now)
    except (InvalidSpecError, EncodingError) as exc:
        logger.warning("Rejected presign request for %r: %s", payload.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ConfigurationError as exc:
        logger.warning("S3 credentials unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc

    return S3PresignPostResponse(
        url=envelope["url"],
        credentials=envelope["credentials"],
        expires_in_sec=expires_in_sec,
    )
