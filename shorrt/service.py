"""Link creation and resolution.

Creation writes the QR artifact, inserts the row and warms the cache.
Resolution reads the cache first and falls back to the store. Cache failures
are logged and never fail a request. Store failures fail it, except on the
access counter, where the redirect has already been decided.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AnyUrl, TypeAdapter, UrlConstraints
from pydantic import ValidationError as PydanticValidationError

from . import models
from .cache import LinkCache
from .crud import LinkStore
from .errors import CacheUnavailable, Expired, NotFound, StoreUnavailable, ValidationError
from .qr_utils import QRCodeWriter
from .tokens import TokenGenerator

logger = logging.getLogger("shorrt.service")

# HttpUrl caps length at 2083; long URLs are the point of a shortener
_http_url = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(max_length=None, allowed_schemes=["http", "https"], host_required=True)]
)

CUSTOM_SHORT_RE = re.compile(r"[A-Za-z0-9_-]{1,32}")

# Paths the app serves itself; a link named like one of these could never resolve
RESERVED = {"urls", "shorten", "health", "qrcodes", "static", "docs", "redoc",
            "openapi.json", "favicon.ico"}


def validate_original(original: str) -> str:
    try:
        _http_url.validate_python(original)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid URL: {original!r}") from exc
    return original


def validate_custom_short(custom_short: str) -> str:
    if custom_short in RESERVED or not CUSTOM_SHORT_RE.fullmatch(custom_short):
        raise ValidationError(
            f"Invalid custom short link {custom_short!r}: "
            "use 1-32 letters, digits, '-' or '_' and avoid reserved names"
        )
    return custom_short


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LinkService:
    def __init__(
        self,
        store: LinkStore,
        cache: LinkCache,
        tokens: TokenGenerator,
        artifacts: QRCodeWriter,
        clock=utcnow,
    ):
        self.store = store
        self.cache = cache
        self.tokens = tokens
        self.artifacts = artifacts
        self.clock = clock

    # --- creation ---
    def create(
        self,
        original: str,
        custom_short: str | None = None,
        expiration_date: datetime | None = None,
    ) -> models.Link:
        validate_original(original)
        if custom_short:
            token = validate_custom_short(custom_short)
        else:
            token, custom_short = self.tokens.generate(), None
            while token in RESERVED:
                token = self.tokens.generate()
        if expiration_date is not None and expiration_date.tzinfo is None:
            expiration_date = expiration_date.replace(tzinfo=timezone.utc)

        qr_path = self.artifacts.write(token)

        link = models.Link(
            original=original,
            short=token,
            qr_code=qr_path,
            custom_short=custom_short,
            expiration_date=expiration_date,
            access_count=0,
        )
        link = self.store.insert(link)
        logger.info("Created link %s -> %s (id=%s)", token, original, link.id)

        self._cache_set(token, original)
        return link

    # --- resolution ---
    def resolve(self, token: str) -> str:
        original = self._cache_get(token)
        if original is not None:
            try:
                if self.store.increment_access_count(token, self.clock()):
                    logger.debug("Cache hit for %s", token)
                    return original
            except StoreUnavailable:
                logger.exception("Error updating access count for %s", token)
                return original
            # Cached entry outlived its link; let the store decide
            self._cache_delete(token)

        link = self.store.find_by_token(token)
        if link is None:
            logger.warning("No rows found for short link: %s", token)
            raise NotFound(token)
        if link.is_expired(self.clock()):
            logger.warning("Link has expired: %s", token)
            self._cache_delete(token)
            raise Expired(token)

        original = link.original
        self._cache_set(token, original)
        try:
            self.store.increment_access_count(token, self.clock())
        except StoreUnavailable:
            logger.exception("Error updating access count for %s", token)
        return original

    def list_all(self) -> list[models.Link]:
        return self.store.list_all()

    # --- best-effort cache access ---
    def _cache_get(self, token: str) -> str | None:
        try:
            return self.cache.get(token)
        except CacheUnavailable:
            logger.exception("Cache lookup failed for %s", token)
            return None

    def _cache_set(self, token: str, original: str) -> None:
        try:
            self.cache.set(token, original)
        except CacheUnavailable:
            logger.exception("Cache write failed for %s", token)

    def _cache_delete(self, token: str) -> None:
        try:
            self.cache.delete(token)
        except CacheUnavailable:
            logger.exception("Cache eviction failed for %s", token)
