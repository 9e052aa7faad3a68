"""
Image update resolution - turns step config entries into values file changes.

For every configured entry, in declaration order:
1. Literal entries are assigned as-is, without touching the object store.
2. Matched entries search the eligible origins: the entry's fromOrigin if
   set, otherwise every requested origin in request order.
3. An origin is only trusted for an image if its warehouse declares a
   subscription to that image repository.
4. The first eligible origin whose Freight carries the image wins.

Resolution is all-or-nothing: the first entry that cannot be resolved, or
any failing warehouse lookup, aborts the whole run and no changes are
returned.
"""

import logging
from typing import Optional

from promostep.context import StepContext
from promostep.errors import ResolutionError
from promostep.schemas import (
    ImageRecord,
    LiteralValue,
    MatchedImage,
    OriginRef,
    StepConfig,
    ValueKind,
)

logger = logging.getLogger(__name__)


def get_value(image: ImageRecord, kind: str) -> str:
    """
    Format the value written for a resolved image.

    Unknown tokens are returned unchanged. The function never fails, so a
    malformed token that slipped past validation degrades to a literal.
    """
    if kind == ValueKind.IMAGE_AND_TAG:
        return f"{image.repo_url}:{image.tag}"
    elif kind == ValueKind.TAG:
        return image.tag
    elif kind == ValueKind.IMAGE_AND_DIGEST:
        return f"{image.repo_url}@{image.digest}"
    elif kind == ValueKind.DIGEST:
        return image.digest
    else:
        return kind


def get_desired_origin(from_origin: Optional[OriginRef]) -> Optional[OriginRef]:
    """
    Return the single origin an entry is pinned to, or None if it is not.

    None means every requested origin is eligible.
    """
    if from_origin is None:
        return None
    return OriginRef(kind=from_origin.kind, name=from_origin.name)


def find_image(ctx: StepContext, entry: MatchedImage) -> Optional[ImageRecord]:
    """
    Search the eligible origins for entry's image.

    Returns:
        The first matching image record, or None

    Raises:
        ResolutionError: If a warehouse lookup fails or the step is cancelled
    """
    desired = get_desired_origin(entry.from_origin)
    origins = (desired,) if desired is not None else ctx.freight_requests

    for origin in origins:
        try:
            ctx.raise_if_cancelled()
            warehouse = ctx.warehouse_client.get_warehouse(ctx.project, origin.name)
        except Exception as e:
            raise ResolutionError(f"failed to generate image updates: {e}") from e

        if warehouse is None:
            logger.debug("Origin %s: warehouse not found, skipping", origin.key)
            continue
        if not warehouse.subscribes_to(entry.repo_url):
            logger.debug("Origin %s: no subscription to %s, skipping", origin.key, entry.repo_url)
            continue

        freight = ctx.freight.get(origin)
        image = freight.find_image(entry.repo_url) if freight is not None else None
        if image is not None:
            logger.debug("Resolved %s from %s", entry.repo_url, origin.key)
            return image

    return None


def generate_image_updates(ctx: StepContext, cfg: StepConfig) -> dict[str, str]:
    """
    Resolve every image entry of cfg into a key -> value mapping.

    Args:
        ctx: Step context (project, freight, requested origins, warehouse client)
        cfg: Typed step configuration

    Returns:
        Changes in entry declaration order

    Raises:
        ResolutionError: On the first unresolvable entry or failed lookup
    """
    changes: dict[str, str] = {}
    for entry in cfg.images:
        if isinstance(entry, LiteralValue):
            logger.debug("Key %s: literal value", entry.key)
            changes[entry.key] = entry.value
            continue

        image = find_image(ctx, entry)
        if image is None:
            raise ResolutionError(f"image {entry.repo_url} not found in referenced Freight")
        changes[entry.key] = get_value(image, entry.value)

    return changes
