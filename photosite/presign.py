"""Signing of temporary download URLs for objects in an OSS bucket."""

import hashlib
import hmac
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol
from urllib.parse import quote, urlsplit

DEFAULT_PRESIGN_EXPIRE_SECONDS = 300
MAX_PRESIGN_EXPIRE_SECONDS = 7 * 24 * 3600

_ALGORITHM = "OSS4-HMAC-SHA256"
_PRODUCT = "oss"
_REQUEST = "aliyun_v4_request"


class DownloadURLSigner(Protocol):
    """Turns the stored URL or key of an object into a temporary download URL."""

    def sign_download_url(self, source_url):
        ...


@dataclass(frozen=True)
class OSSCredentials:
    """Access key pair with an optional session token."""

    access_key_id: str
    access_key_secret: str
    security_token: str = ""


def _credentials_from_env(environ):
    key_id = environ.get("OSS_ACCESS_KEY_ID", "")
    key_secret = environ.get("OSS_ACCESS_KEY_SECRET", "")
    if not key_id or not key_secret:
        raise ValueError(
            "load oss credentials from env failed: access key id or access key secret is empty"
        )
    return OSSCredentials(key_id, key_secret, environ.get("OSS_SESSION_TOKEN", ""))


def _encode(value, keep_slash=False):
    return quote(value, safe="/" if keep_slash else "")


def _hmac(key, message):
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def normalize_endpoint(endpoint):
    """Bare host (and port) of an endpoint that may carry a scheme."""
    value = endpoint.strip()
    if not value:
        raise ValueError("oss endpoint is required")
    if "://" in value:
        try:
            value = urlsplit(value).netloc.strip()
        except ValueError as exc:
            raise ValueError(f"parse oss endpoint failed: {exc}") from exc
    value = value.removesuffix("/")
    if not value:
        raise ValueError("oss endpoint is empty")
    return value


def infer_region_from_endpoint(endpoint):
    """Region named by an ``oss-<region>.`` endpoint, or an empty string."""
    host = endpoint.strip().lower()
    if not host:
        return ""
    first = host.split(".")[0]
    if first.startswith("oss-"):
        return first.removeprefix("oss-")
    return ""


def parse_public_base_url(raw):
    """Lower-cased host and slash-trimmed path of the public base URL."""
    value = raw.strip()
    if not value:
        return "", ""
    try:
        parts = urlsplit(value)
        host = parts.hostname or ""
    except ValueError as exc:
        raise ValueError(f"parse oss public_base_url failed: {exc}") from exc
    if not host:
        raise ValueError("invalid oss public_base_url: host is empty")
    return host.lower(), parts.path.strip().strip("/")


class PresignDownloadURLSigner:
    """Produces pre-signed GET URLs with the OSS V4 signature."""

    def __init__(
        self,
        bucket_name,
        endpoint,
        region,
        public_base_host,
        public_base_path,
        expires,
        credentials,
    ):
        self.bucket_name = bucket_name
        self.endpoint = endpoint
        self.region = region
        self.public_base_host = public_base_host
        self.public_base_path = public_base_path
        self.expires = expires
        self.credentials = credentials

    @classmethod
    def from_config(cls, cfg, environ=None):
        """Build a signer from an OSSConfig, reading credentials from the environment."""
        if environ is None:
            environ = os.environ

        bucket_name = cfg.bucket_name.strip()
        if not bucket_name:
            raise ValueError("oss bucket_name is required")

        endpoint = normalize_endpoint(cfg.endpoint)

        region = cfg.region.strip() or infer_region_from_endpoint(endpoint)
        if not region:
            raise ValueError("oss region is required")

        expires = cfg.presign_expire_seconds
        if expires <= 0:
            expires = DEFAULT_PRESIGN_EXPIRE_SECONDS

        public_base_host, public_base_path = parse_public_base_url(cfg.public_base_url)
        credentials = _credentials_from_env(environ)

        return cls(
            bucket_name,
            endpoint,
            region,
            public_base_host,
            public_base_path,
            expires,
            credentials,
        )

    def sign_download_url(self, source_url):
        """A temporary GET URL for the object that ``source_url`` points at."""
        object_key = self.object_key_from_source_url(source_url)
        if self.expires > MAX_PRESIGN_EXPIRE_SECONDS:
            raise ValueError(
                "presign oss get object failed: expires should be not greater than "
                f"{MAX_PRESIGN_EXPIRE_SECONDS} seconds"
            )

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        scope = f"{stamp[:8]}/{self.region}/{_PRODUCT}/{_REQUEST}"

        params = {
            "x-oss-credential": f"{self.credentials.access_key_id}/{scope}",
            "x-oss-date": stamp,
            "x-oss-expires": str(self.expires),
            "x-oss-signature-version": _ALGORITHM,
        }
        if self.credentials.security_token:
            params["x-oss-security-token"] = self.credentials.security_token
        canonical_query = "&".join(
            f"{_encode(k)}={_encode(v)}" for k, v in sorted(params.items())
        )

        encoded_key = _encode(object_key, keep_slash=True)
        canonical_request = "\n".join(
            [
                "GET",
                f"/{self.bucket_name}/{encoded_key}",
                canonical_query,
                "",
                "",
                "UNSIGNED-PAYLOAD",
            ]
        )
        string_to_sign = "\n".join(
            [
                _ALGORITHM,
                stamp,
                scope,
                hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
            ]
        )

        key = ("aliyun_v4" + self.credentials.access_key_secret).encode("utf-8")
        for part in (stamp[:8], self.region, _PRODUCT, _REQUEST):
            key = _hmac(key, part)
        signature = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        return (
            f"https://{self.bucket_name}.{self.endpoint}/{encoded_key}"
            f"?{canonical_query}&x-oss-signature={signature}"
        )

    def object_key_from_source_url(self, source_url):
        """Object key from a full public URL or from a bare key."""
        raw = source_url.strip()
        if not raw:
            raise ValueError("source url is empty")

        if "://" not in raw:
            object_key = raw.removeprefix("/").strip(" ")
            if not object_key:
                raise ValueError("invalid object key")
            return object_key

        try:
            parts = urlsplit(raw)
            hostname = parts.hostname or ""
        except ValueError as exc:
            raise ValueError(f"parse source url failed: {exc}") from exc

        object_key = parts.path.removeprefix("/")
        if not object_key:
            raise ValueError("missing object key in source url")

        if (
            self.public_base_host
            and hostname.lower() == self.public_base_host.lower()
            and self.public_base_path
        ):
            prefix = self.public_base_path + "/"
            if object_key.startswith(prefix):
                object_key = object_key.removeprefix(prefix)
            elif object_key == self.public_base_path:
                object_key = ""

        object_key = object_key.removeprefix("/")
        if not object_key:
            raise ValueError("invalid object key in source url")
        return object_key