from s3_direct_upload.routers.storage import router as storage_router

__all__ = ["storage_router"]
