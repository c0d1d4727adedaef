from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError

from s3_direct_upload.config import (
    DEFAULT_REGION,
    get_s3_access_key_id,
    get_s3_credentials_source,
    get_s3_region,
    get_s3_secret_access_key,
    get_s3_session_token,
)
from s3_direct_upload.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialsSnapshot:
    access_key_id: str
    secret_access_key: str
    region: str = DEFAULT_REGION
    security_token: str | None = None

    def __post_init__(self) -> None:
        if not self.security_token:
            object.__setattr__(self, "security_token", None)
        if not self.region:
            object.__setattr__(self, "region", DEFAULT_REGION)


class CredentialsProvider(Protocol):
    def resolve(self, scope: str = "s3") -> CredentialsSnapshot: ...


def build_snapshot(
    *,
    access_key_id: str | None,
    secret_access_key: str | None,
    region: str | None = None,
    security_token: str | None = None,
) -> CredentialsSnapshot:
    if not access_key_id or not secret_access_key:
        raise ConfigurationError("S3 credentials missing: access key id and secret access key are required")
    return CredentialsSnapshot(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        region=region or DEFAULT_REGION,
        security_token=security_token or None,
    )


class StaticCredentialsProvider:
    def __init__(
        self,
        *,
        access_key_id: str | None,
        secret_access_key: str | None,
        region: str | None = None,
        security_token: str | None = None,
    ) -> None:
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._region = region
        self._security_token = security_token

    def resolve(self, scope: str = "s3") -> CredentialsSnapshot:
        del scope
        return build_snapshot(
            access_key_id=self._access_key_id,
            secret_access_key=self._secret_access_key,
            region=self._region,
            security_token=self._security_token,
        )


class EnvCredentialsProvider:
    """Reads ``S3_ACCESS_KEY_ID``/``S3_SECRET_ACCESS_KEY``/``S3_REGION``/``S3_SESSION_TOKEN`` on every call."""

    def resolve(self, scope: str = "s3") -> CredentialsSnapshot:
        del scope
        return build_snapshot(
            access_key_id=get_s3_access_key_id(),
            secret_access_key=get_s3_secret_access_key(),
            region=get_s3_region(),
            security_token=get_s3_session_token(),
        )


class BotoCredentialsProvider:
    """Resolves credentials through the boto3 default provider chain.

    Covers environment variables, shared config/credentials files, SSO and
    instance/container metadata. Temporary credentials are frozen so the
    access key, secret and token always belong to the same refresh.
    """

    def __init__(self, *, session: boto3.session.Session | None = None, region: str | None = None) -> None:
        self._session = session
        self._region = region

    def resolve(self, scope: str = "s3") -> CredentialsSnapshot:
        try:
            session = self._session or boto3.session.Session()
            credentials = session.get_credentials()
            if credentials is None:
                raise ConfigurationError(f"No AWS credentials found for {scope} in the boto3 provider chain")
            frozen = credentials.get_frozen_credentials()
            region = self._region or session.region_name or get_s3_region()
        except BotoCoreError as exc:
            raise ConfigurationError(f"AWS credential lookup for {scope} failed: {exc}") from exc
        logger.debug("Resolved %s credentials via boto3 (method=%s, region=%s)", scope, credentials.method, region)
        return build_snapshot(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            region=region,
            security_token=frozen.token,
        )


def get_credentials_provider() -> CredentialsProvider:
    source = get_s3_credentials_source()
    if source == "env":
        return EnvCredentialsProvider()
    if source == "boto":
        return BotoCredentialsProvider()
    raise ConfigurationError(f"Unknown S3_CREDENTIALS_SOURCE: {source}")
