import json
from datetime import UTC, datetime, timedelta, timezone

import pytest

from s3_direct_upload.errors import ConfigurationError, EncodingError, InvalidSpecError
from s3_direct_upload.services.credentials import CredentialsSnapshot, StaticCredentialsProvider
from s3_direct_upload.services.direct_upload import (
    UploadSpec,
    decode_policy,
    derive_signing_key,
    presigned,
    presigned_json,
    sign_policy,
)

_NOW = datetime(2017, 1, 1, tzinfo=UTC)
_GOLDEN_SIGNATURE = "1c1210287ea2cb1c915ee11b9515b2d811f4b21a90e78a45f12465974ebb95f1"


def _spec(**overrides) -> UploadSpec:
    values = {
        "filename": "file.jpg",
        "mimetype": "image/jpeg",
        "path": "path/in/bucket",
        "bucket": "s3-bucket",
    }
    values.update(overrides)
    return UploadSpec(**values)


def _provider(security_token: str | None = None, region: str | None = None) -> StaticCredentialsProvider:
    return StaticCredentialsProvider(
        access_key_id="123abc",
        secret_access_key="abc123",
        region=region,
        security_token=security_token,
    )


def _presign(spec: UploadSpec | None = None, **kwargs) -> dict:
    kwargs.setdefault("credentials_provider", _provider())
    kwargs.setdefault("clock", lambda: _NOW)
    return presigned(spec or _spec(), **kwargs)


def test_presigned_matches_reference_signature():
    result = _presign()

    assert result["url"] == "https://s3-bucket.s3.us-east-1.amazonaws.com"
    credentials = result["credentials"]
    assert credentials["acl"] == "public-read"
    assert credentials["key"] == "path/in/bucket/file.jpg"
    assert credentials["policy"][:10] == "eyJleHBpcm"
    assert credentials["x-amz-algorithm"] == "AWS4-HMAC-SHA256"
    assert credentials["x-amz-credential"] == "123abc/20170101/us-east-1/s3/aws4_request"
    assert credentials["x-amz-date"] == "20170101T000000Z"
    assert credentials["x-amz-signature"] == _GOLDEN_SIGNATURE
    assert "x-amz-security-token" not in credentials


def test_policy_document_lists_base_conditions_in_order():
    policy = decode_policy(_presign()["credentials"]["policy"])

    assert list(policy) == ["expiration", "conditions"]
    assert policy["expiration"] == "2017-01-01T01:00:00Z"
    assert policy["conditions"] == [
        {"bucket": "s3-bucket"},
        {"acl": "public-read"},
        {"x-amz-algorithm": "AWS4-HMAC-SHA256"},
        {"x-amz-credential": "123abc/20170101/us-east-1/s3/aws4_request"},
        {"x-amz-date": "20170101T000000Z"},
        ["starts-with", "$Content-Type", "image/jpeg"],
        ["starts-with", "$key", "path/in/bucket"],
    ]


def test_presigned_is_deterministic_for_fixed_inputs():
    assert presigned_json(_spec(), credentials_provider=_provider(), clock=lambda: _NOW) == presigned_json(
        _spec(), credentials_provider=_provider(), clock=lambda: _NOW
    )


def test_presigned_json_encodes_the_same_envelope():
    encoded = presigned_json(_spec(), credentials_provider=_provider(), clock=lambda: _NOW)

    assert json.loads(encoded) == _presign()


def test_signature_is_lowercase_hex_of_policy_hmac():
    credentials = _presign()["credentials"]
    signing_key = derive_signing_key("abc123", "20170101", "us-east-1")

    assert credentials["x-amz-signature"] == sign_policy(signing_key, credentials["policy"])
    assert len(credentials["x-amz-signature"]) == 64
    assert credentials["x-amz-signature"] == credentials["x-amz-signature"].lower()


def test_security_token_adds_field_and_condition_before_additional_conditions():
    spec = _spec(additional_conditions=[["content-length-range", 0, 1024]])

    without_token = _presign(spec)
    with_token = _presign(spec, credentials_provider=_provider(security_token="test_security_token"))

    credentials = with_token["credentials"]
    assert credentials["x-amz-security-token"] == "test_security_token"
    assert credentials["x-amz-signature"] != without_token["credentials"]["x-amz-signature"]
    assert credentials["x-amz-date"] == "20170101T000000Z"

    conditions = decode_policy(credentials["policy"])["conditions"]
    assert conditions[-2:] == [
        {"x-amz-security-token": "test_security_token"},
        ["content-length-range", 0, 1024],
    ]
    plain_conditions = decode_policy(without_token["credentials"]["policy"])["conditions"]
    assert not any(isinstance(c, dict) and "x-amz-security-token" in c for c in plain_conditions)
    assert "x-amz-security-token" not in without_token["credentials"]


def test_additional_conditions_are_a_suffix_in_caller_order():
    extra = [["content-length-range", 0, 1024], {"foo": "bar"}, ("eq", "$x-amz-meta-user", "alice")]

    conditions = decode_policy(_presign(_spec(additional_conditions=extra))["credentials"]["policy"])["conditions"]

    assert conditions[-3:] == [["content-length-range", 0, 1024], {"foo": "bar"}, ["eq", "$x-amz-meta-user", "alice"]]
    assert len(conditions) == 10


def test_expiration_changes_policy_and_signature_only():
    default = _presign()
    custom = _presign(_spec(expiration=datetime(2020, 1, 1, tzinfo=UTC)))

    assert decode_policy(custom["credentials"]["policy"])["expiration"] == "2020-01-01T00:00:00Z"
    assert custom["credentials"]["x-amz-signature"] != default["credentials"]["x-amz-signature"]
    assert custom["credentials"]["x-amz-date"] == default["credentials"]["x-amz-date"]
    assert custom["credentials"]["x-amz-credential"] == default["credentials"]["x-amz-credential"]


def test_expiration_in_other_timezone_is_rendered_in_utc():
    expiration = datetime(2020, 1, 1, 9, 30, tzinfo=timezone(timedelta(hours=9)))

    policy = decode_policy(_presign(_spec(expiration=expiration))["credentials"]["policy"])

    assert policy["expiration"] == "2020-01-01T00:30:00Z"


def test_x_amz_date_is_truncated_to_midnight():
    clock = lambda: datetime(2017, 3, 4, 15, 42, 7, 123456, tzinfo=UTC)  # noqa: E731

    result = _presign(clock=clock)

    assert result["credentials"]["x-amz-date"] == "20170304T000000Z"
    assert result["credentials"]["x-amz-credential"] == "123abc/20170304/us-east-1/s3/aws4_request"
    assert decode_policy(result["credentials"]["policy"])["expiration"] == "2017-03-04T16:42:07.123456Z"


def test_region_flows_into_url_and_scope():
    result = _presign(credentials_provider=_provider(region="eu-west-1"))

    assert result["url"] == "https://s3-bucket.s3.eu-west-1.amazonaws.com"
    assert result["credentials"]["x-amz-credential"] == "123abc/20170101/eu-west-1/s3/aws4_request"


def test_key_keeps_leading_slash_for_empty_path():
    result = _presign(_spec(path=""))

    assert result["credentials"]["key"] == "/file.jpg"
    assert ["starts-with", "$key", ""] in decode_policy(result["credentials"]["policy"])["conditions"]


def test_custom_date_util_overrides_formatting():
    class _FixedDateUtil:
        def format_datetime(self, value):
            del value
            return "20991231T000000Z"

        def format_date(self, value):
            del value
            return "20991231"

        def format_expiration(self, value):
            del value
            return "2100-01-01T00:00:00Z"

    credentials = _presign(date_util=_FixedDateUtil())["credentials"]

    assert credentials["x-amz-date"] == "20991231T000000Z"
    assert credentials["x-amz-credential"] == "123abc/20991231/us-east-1/s3/aws4_request"
    assert decode_policy(credentials["policy"])["expiration"] == "2100-01-01T00:00:00Z"


@pytest.mark.parametrize("field", ["bucket", "filename"])
def test_upload_spec_requires_bucket_and_filename(field):
    with pytest.raises(InvalidSpecError):
        _spec(**{field: ""})


def test_upload_spec_is_immutable():
    spec = _spec(additional_conditions=[{"foo": "bar"}])

    assert spec.additional_conditions == ({"foo": "bar"},)
    with pytest.raises(AttributeError):
        spec.bucket = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    "condition",
    [
        {"a": "1", "b": "2"},
        ["starts-with", "$key"],
        "starts-with $key uploads/",
        42,
        ["eq", "$key", object()],
    ],
)
def test_malformed_conditions_raise_encoding_error(condition):
    with pytest.raises(EncodingError):
        _presign(_spec(additional_conditions=[condition]))


def test_missing_secret_raises_configuration_error():
    class _BrokenProvider:
        def resolve(self, scope="s3"):
            del scope
            return CredentialsSnapshot(access_key_id="123abc", secret_access_key="")

    with pytest.raises(ConfigurationError):
        _presign(credentials_provider=_BrokenProvider())


def test_default_provider_reads_environment(monkeypatch):
    monkeypatch.setenv("S3_CREDENTIALS_SOURCE", "env")
    monkeypatch.setenv("S3_ACCESS_KEY_ID", "123abc")
    monkeypatch.setenv("S3_SECRET_ACCESS_KEY", "abc123")
    monkeypatch.delenv("S3_REGION", raising=False)
    monkeypatch.delenv("S3_SESSION_TOKEN", raising=False)

    result = presigned(_spec(), clock=lambda: _NOW)

    assert result["credentials"]["x-amz-signature"] == _GOLDEN_SIGNATURE


def test_empty_security_token_from_custom_provider_is_ignored():
    class _EmptyTokenProvider:
        def resolve(self, scope="s3"):
            del scope
            return CredentialsSnapshot(access_key_id="123abc", secret_access_key="abc123", security_token="")

    credentials = _presign(credentials_provider=_EmptyTokenProvider())["credentials"]

    assert "x-amz-security-token" not in credentials
    assert credentials["x-amz-signature"] == _GOLDEN_SIGNATURE
