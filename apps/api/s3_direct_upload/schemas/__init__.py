from s3_direct_upload.schemas.upload import S3PresignPostRequest, S3PresignPostResponse

__all__ = ["S3PresignPostRequest", "S3PresignPostResponse"]
