from typing import Any

from pydantic import BaseModel, Field

from s3_direct_upload.config import MAX_EXPIRES_IN_SEC, MIN_EXPIRES_IN_SEC


class S3PresignPostRequest(BaseModel):
    filename: str = Field(min_length=1)
    content_type: str = Field(default="application/octet-stream", min_length=1)
    path: str = ""
    bucket: str | None = None
    acl: str | None = None
    expires_in_sec: int | None = Field(default=None, ge=MIN_EXPIRES_IN_SEC, le=MAX_EXPIRES_IN_SEC)
    additional_conditions: list[dict[str, Any] | list[Any]] = Field(default_factory=list)


class S3PresignPostResponse(BaseModel):
    url: str
    credentials: dict[str, str]
    upload_method: str = "POST"
    expires_in_sec: int
