"""Image ingestion: turn image files and URLs into embeddable references."""

import asyncio
import base64
import mimetypes
from collections.abc import Sequence
from pathlib import Path

import requests
from loguru import logger

from zenscript.models.block import ImageData
from zenscript.protocols import ImageSourceProtocol

FETCH_TIMEOUT = 30


class DataUriImageSource:
    """Encode image bytes as a self-contained ``data:`` URI."""

    def to_reference(self, data: bytes, media_type: str) -> str:
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{media_type};base64,{encoded}"


def guess_media_type(path: Path) -> str | None:
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type


def is_image_type(media_type: str | None) -> bool:
    return media_type is not None and media_type.startswith("image/")


async def _read_reference(path: Path, media_type: str, source: ImageSourceProtocol) -> str:
    data = await asyncio.to_thread(path.read_bytes)
    return source.to_reference(data, media_type)


async def load_image_files(
    paths: Sequence[Path],
    source: ImageSourceProtocol | None = None,
) -> list[ImageData]:
    """Convert image files into ImageData, concurrently, keeping input order.

    Files whose media type is not ``image/*`` are skipped.
    """
    source = source or DataUriImageSource()
    accepted: list[tuple[Path, str]] = []
    for path in paths:
        media_type = guess_media_type(path)
        if is_image_type(media_type):
            accepted.append((path, media_type))  # type: ignore[arg-type]
        else:
            logger.warning("Skipping {}: not an image ({})", path.name, media_type)

    refs = await asyncio.gather(*(_read_reference(p, t, source) for p, t in accepted))
    logger.debug("Converted {} image file(s)", len(refs))
    return [ImageData.new(ref) for ref in refs]


def fetch_image(
    url: str,
    source: ImageSourceProtocol | None = None,
    *,
    session: requests.Session | None = None,
) -> ImageData:
    """Download a remote image and convert it into ImageData.

    Without a ``session``, a fresh one is opened for this request and closed afterwards.

    Raises:
        requests.HTTPError: If the server answers with an error status.
        ValueError: If the response is not an image.
    """
    if session is None:
        with requests.Session() as owned:
            return fetch_image(url, source, session=owned)

    source = source or DataUriImageSource()
    logger.debug("Fetching image {!r}", url)
    r = session.get(url, timeout=FETCH_TIMEOUT)
    r.raise_for_status()
    media_type = r.headers.get("Content-Type", "").split(";")[0].strip()
    if not is_image_type(media_type):
        media_type = mimetypes.guess_type(url)[0] or media_type
    if not is_image_type(media_type):
        msg = f"Not an image: {url!r} ({media_type or 'unknown type'})"
        raise ValueError(msg)
    return ImageData.new(source.to_reference(r.content, media_type))
