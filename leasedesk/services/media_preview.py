"""Photo preview resolution for offer media links (direct images and Yandex Disk)."""

import logging
import re
import time
from typing import Any, Callable, Generic, Hashable, TypeVar
from urllib.parse import parse_qs, urlsplit

import httpx

logger = logging.getLogger(__name__)

DEFAULT_YANDEX_API_URL = "https://cloud-api.yandex.net/v1/disk/public/resources"
PREVIEW_SIZE = "XL"
PREVIEW_ITEMS_LIMIT = 20
GALLERY_ITEMS_LIMIT = 200
DEFAULT_CACHE_MAX_ENTRIES = 2048

_IMAGE_EXTENSION_RE = re.compile(r"\.(png|jpe?g|webp|gif|bmp|svg)$", re.IGNORECASE)

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Bounded key/value cache whose entries expire ``ttl_seconds`` after insertion.

    Misses can be cached too: store None to remember that a key resolved
    to nothing. When full, expired entries are swept first and then the
    oldest insertions are evicted.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, V]] = {}

    def get(self, key: Hashable) -> tuple[bool, V | None]:
        """Return ``(hit, value)``; expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return False, None
        return True, value

    def _sweep(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def set(self, key: Hashable, value: V) -> None:
        now = self._clock()
        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_entries:
            self._sweep(now)
        while len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]
        self._entries[key] = (now + self.ttl_seconds, value)


def _is_image_path(path: str) -> bool:
    return bool(_IMAGE_EXTENSION_RE.search(path))


def is_direct_image_url(url: str) -> bool:
    """Whether ``url`` already points at an image file or rendered preview."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    host = (parts.hostname or "").lower()
    if host == "downloader.disk.yandex.ru" and "/preview/" in parts.path:
        return True
    if _is_image_path(parts.path):
        return True

    params = parse_qs(parts.query)
    content_type = (params.get("content_type") or [""])[0].lower()
    if content_type.startswith("image/"):
        return True
    filename = (params.get("filename") or [""])[0]
    return _is_image_path(filename)


def is_yandex_public_link(url: str) -> bool:
    """Whether ``url`` is a Yandex Disk public share link."""
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return False
    return host == "yadi.sk" or host.endswith(".yadi.sk") or host.startswith("disk.yandex.")


def _is_image_resource(resource: dict[str, Any]) -> bool:
    mime_type = resource.get("mime_type") or ""
    return resource.get("media_type") == "image" or mime_type.startswith("image/")


def _embedded_items(resource: dict[str, Any]) -> list[dict[str, Any]]:
    embedded = resource.get("_embedded") or {}
    return [item for item in embedded.get("items") or [] if isinstance(item, dict)]


def pick_preview(resource: dict[str, Any]) -> str | None:
    """Choose one preview image from a public resource description.

    The resource's own preview wins; then the file itself when it is an
    image; then the first image inside a folder.
    """
    if resource.get("preview"):
        return resource["preview"]
    if _is_image_resource(resource) and resource.get("file"):
        return resource["file"]

    for item in _embedded_items(resource):
        if _is_image_resource(item):
            return item.get("preview") or item.get("file")
    return None


def pick_gallery(resource: dict[str, Any]) -> list[str]:
    """All image URLs of a public resource, deduplicated in order."""
    urls: list[str] = []
    if _is_image_resource(resource):
        root = resource.get("preview") or resource.get("file")
        if root:
            urls.append(root)

    for item in _embedded_items(resource):
        if not _is_image_resource(item):
            continue
        image_url = item.get("preview") or item.get("file")
        if image_url:
            urls.append(image_url)

    return list(dict.fromkeys(urls))


class MediaPreviewService:
    """Resolves media links to displayable image URLs.

    Preview lookups (misses included) are cached per source URL. The HTTP
    client is injected so the app can share one and tests can mock it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: TTLCache[str | None],
        api_url: str = DEFAULT_YANDEX_API_URL,
    ):
        self.client = client
        self.cache = cache
        self.api_url = api_url

    async def _fetch_resource(self, public_url: str, limit: int) -> dict[str, Any] | None:
        response = await self.client.get(
            self.api_url,
            params={"public_key": public_url, "preview_size": PREVIEW_SIZE, "limit": limit},
        )
        if response.status_code != 200:
            logger.info("Yandex Disk lookup returned %d for %s", response.status_code, public_url)
            return None
        payload = response.json()
        return payload if isinstance(payload, dict) else None

    async def resolve_preview(self, source_url: str) -> str | None:
        """Return a preview image URL for ``source_url``, or None."""
        url = source_url.strip()
        if not url:
            return None

        hit, cached = self.cache.get(url)
        if hit:
            return cached

        preview_url: str | None = None
        if is_direct_image_url(url):
            preview_url = url
        elif is_yandex_public_link(url):
            try:
                resource = await self._fetch_resource(url, PREVIEW_ITEMS_LIMIT)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Preview lookup failed for %s: %s", url, e)
                resource = None
            if resource:
                preview_url = pick_preview(resource)

        self.cache.set(url, preview_url)
        return preview_url

    async def resolve_gallery(self, source_url: str) -> list[str]:
        """Return every image URL behind ``source_url``."""
        url = source_url.strip()
        if not url:
            return []
        if is_direct_image_url(url):
            return [url]
        if not is_yandex_public_link(url):
            return []

        try:
            resource = await self._fetch_resource(url, GALLERY_ITEMS_LIMIT)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Gallery lookup failed for %s: %s", url, e)
            return []
        return pick_gallery(resource) if resource else []

    async def fetch_preview_image(self, source_url: str) -> tuple[bytes, str] | None:
        """Download the preview image for ``source_url``.

        Returns:
            ``(content, content_type)`` or None when there is no preview or
            the download failed.
        """
        preview_url = await self.resolve_preview(source_url)
        if not preview_url:
            return None
        try:
            response = await self.client.get(preview_url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning("Preview download failed for %s: %s", preview_url, e)
            return None
        if response.status_code != 200:
            return None
        return response.content, response.headers.get("content-type", "image/jpeg")
