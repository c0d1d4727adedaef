import os
from pathlib import Path

from dotenv import load_dotenv


_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(_ENV_PATH, override=False)

DEFAULT_REGION = "us-east-1"
DEFAULT_ACL = "public-read"
DEFAULT_EXPIRES_IN_SEC = 60 * 60
MIN_EXPIRES_IN_SEC = 60
MAX_EXPIRES_IN_SEC = 7 * 24 * 60 * 60


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def get_s3_bucket() -> str | None:
    return _get_env("S3_BUCKET")


def get_s3_region() -> str:
    return _get_env("S3_REGION") or DEFAULT_REGION


def get_s3_access_key_id() -> str | None:
    return _get_env("S3_ACCESS_KEY_ID")


def get_s3_secret_access_key() -> str | None:
    return _get_env("S3_SECRET_ACCESS_KEY")


def get_s3_session_token() -> str | None:
    return _get_env("S3_SESSION_TOKEN")


def get_s3_upload_acl() -> str:
    return _get_env("S3_UPLOAD_ACL") or DEFAULT_ACL


def get_s3_upload_expires_in_sec() -> int:
    raw = _get_env("S3_UPLOAD_EXPIRES_IN_SEC")
    if raw is None:
        return DEFAULT_EXPIRES_IN_SEC
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_EXPIRES_IN_SEC
    if not MIN_EXPIRES_IN_SEC <= value <= MAX_EXPIRES_IN_SEC:
        return DEFAULT_EXPIRES_IN_SEC
    return value


def get_s3_credentials_source() -> str:
    """Return which credentials provider to use: ``env`` or ``boto``.

    ``boto`` defers to the boto3 default chain (env, shared config, instance
    metadata) instead of the ``S3_*`` variables.
    """
    return (_get_env("S3_CREDENTIALS_SOURCE") or "env").lower()


def get_log_level() -> str:
    return (_get_env("LOG_LEVEL") or "INFO").upper()


def get_cors_allow_origins() -> list[str]:
    raw = _get_env("CORS_ALLOW_ORIGINS") or "http://localhost:3000"
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
