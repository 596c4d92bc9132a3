"""Stage 5: Illustrations — fetch, decode and fit each image into its page's
reservation box.

Image references are either ``data:`` URIs or ``http(s)://`` URLs. Page i
gets ``images[i]``; blank entries leave the page without an illustration.

Any fetch or decode failure aborts the whole booklet with
UpstreamImageError — no placeholder is substituted. Images are fetched one
after the other before anything is drawn.
"""
import base64
import binascii
import io
import logging
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image, UnidentifiedImageError

from errors import UpstreamImageError
from models.booklet import DecodedImage, ImagePlacement, LayoutBox
from models.design import DesignSystem
from pipeline.stage2_boxes import image_reservation

logger = logging.getLogger(__name__)

_PNG_SIGNATURE = b"\x89PNG"
_PDF_SAFE_MODES = frozenset({"RGB", "RGBA", "L", "CMYK"})


def run(
    images: list[str | None],
    title_block: float,
    design: DesignSystem,
    client: httpx.Client,
    timeout: float,
) -> list[ImagePlacement]:
    """Load every referenced image and compute its placement.

    Returns one ImagePlacement per page that has an image, in page order.
    """
    placements: list[ImagePlacement] = []
    for page_index, ref in enumerate(images[:design.page.page_count]):
        if not ref or not ref.strip():
            continue
        decoded = load_image(ref.strip(), client, timeout)
        box = image_reservation(page_index, title_block, design)
        placement = fit_image(decoded, box)
        placements.append(placement)
        logger.info(
            "  [page %d] %s %dx%d → %.0fx%.0fpt",
            page_index + 1, decoded.format, decoded.width, decoded.height,
            placement.width, placement.height,
        )

    logger.info("Stage 5 complete: %d illustration(s)", len(placements))
    return placements


# ---------------------------------------------------------------------------
# Fetch + decode
# ---------------------------------------------------------------------------

def load_image(ref: str, client: httpx.Client, timeout: float) -> DecodedImage:
    data = fetch_image_bytes(ref, client, timeout)
    return decode_image(ref, data)


def fetch_image_bytes(ref: str, client: httpx.Client, timeout: float) -> bytes:
    # URI schemes are case-insensitive
    scheme = ref.split(":", 1)[0].lower()
    if scheme == "data":
        return _decode_data_uri(ref)
    if scheme in ("http", "https") and ref[len(scheme):].startswith("://"):
        return _download(ref, client, timeout)
    raise UpstreamImageError(ref, "unsupported image reference (expected a URL or data URI)")


def sniff_format(data: bytes) -> str:
    """PNG if the bytes carry the PNG signature, otherwise JPEG."""
    return "PNG" if data.startswith(_PNG_SIGNATURE) else "JPEG"


def decode_image(ref: str, data: bytes) -> DecodedImage:
    fmt = sniff_format(data)
    try:
        img = Image.open(io.BytesIO(data), formats=[fmt])
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise UpstreamImageError(ref, f"not a decodable {fmt} image ({exc})") from exc

    if img.mode not in _PDF_SAFE_MODES:
        img = img.convert("RGBA" if "transparency" in img.info or "A" in img.mode else "RGB")

    width, height = img.size
    return DecodedImage(format=fmt, width=width, height=height, image=img)


def _download(url: str, client: httpx.Client, timeout: float) -> bytes:
    logger.debug("Fetching %s", url)
    try:
        response = client.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise UpstreamImageError(url, f"timed out after {timeout:g}s") from exc
    except httpx.HTTPStatusError as exc:
        raise UpstreamImageError(url, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamImageError(url, str(exc) or type(exc).__name__) from exc
    return response.content


def _decode_data_uri(uri: str) -> bytes:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise UpstreamImageError(uri, "malformed data URI")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as exc:
            raise UpstreamImageError(uri, "invalid base64 payload") from exc
    return unquote_to_bytes(payload)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def fit_image(image: DecodedImage, box: LayoutBox) -> ImagePlacement:
    """Scale uniformly to fit ``box`` and center the result in it."""
    scale = min(box.width / image.width, box.height / image.height)
    width = image.width * scale
    height = image.height * scale
    return ImagePlacement(
        page_index=box.page_index,
        box=box,
        x=box.center_x - width / 2,
        y=box.center_y - height / 2,
        width=width,
        height=height,
        source=image,
    )
