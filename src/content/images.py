"""Image URL builder for content store assets.

Image fields hold a reference such as
``image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg``; the public URL is
``https://cdn.sanity.io/images/<project>/<dataset>/Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000.jpg``.
"""

import re
from typing import Any
from urllib.parse import urlencode


class InvalidImageReferenceError(ValueError):
    """Raised when an asset reference cannot be parsed."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        self.code = "invalid_image_reference"
        self.message = f"Invalid image reference: {ref!r}"
        super().__init__(self.message)


IMAGE_REF_PATTERN = re.compile(r"^image-([A-Za-z0-9]+)-(\d+)x(\d+)-([a-z0-9]+)$")


def extract_asset_ref(source: Any) -> str | None:
    """Get the asset reference from an image field, asset or plain string.

    Accepts ``{"asset": {"_ref": ...}}`` dicts, pydantic image models with an
    ``asset.ref`` attribute, asset dicts (``{"_ref"}`` / ``{"_id"}``) and
    reference strings.
    """
    if source is None:
        return None
    if isinstance(source, str):
        return source or None
    if isinstance(source, dict):
        asset = source.get("asset", source)
        if isinstance(asset, dict):
            return asset.get("_ref") or asset.get("_id")
        return None
    asset = getattr(source, "asset", None)
    if asset is not None:
        return getattr(asset, "ref", None)
    return getattr(source, "ref", None)


class ImageUrlBuilder:
    """Builds CDN URLs for image assets of one project/dataset."""

    CDN_BASE = "https://cdn.sanity.io/images"

    def __init__(self, project_id: str, dataset: str) -> None:
        self.project_id = project_id
        self.dataset = dataset

    def url(
        self,
        source: Any,
        *,
        width: int | None = None,
        height: int | None = None,
        fit: str | None = None,
    ) -> str | None:
        """Build the URL for an image, or ``None`` when there is no image.

        Raises:
            InvalidImageReferenceError: If the reference is malformed.
        """
        ref = extract_asset_ref(source)
        if ref is None:
            return None

        match = IMAGE_REF_PATTERN.match(ref)
        if match is None:
            raise InvalidImageReferenceError(ref)

        asset_id, w, h, ext = match.groups()
        url = f"{self.CDN_BASE}/{self.project_id}/{self.dataset}/{asset_id}-{w}x{h}.{ext}"

        query: dict[str, str | int] = {}
        if width:
            query["w"] = width
        if height:
            query["h"] = height
        if fit:
            query["fit"] = fit
        if query:
            url = f"{url}?{urlencode(query)}"
        return url
