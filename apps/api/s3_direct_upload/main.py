from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from s3_direct_upload.config import get_cors_allow_origins
from s3_direct_upload.logging_config import configure_logging
from s3_direct_upload.routers import storage_router

configure_logging()

app = FastAPI(
    title="S3 Direct Upload API",
    description="Pre-signed S3 POST credentials for browser uploads",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(storage_router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "s3-direct-upload"}
