"""
StepConfig schema - typed configuration of the helm-update-image step.

The raw configuration is validated against the JSON schema first
(see promostep.validation). from_dict() then turns every image entry into
one of two explicit cases:

- MatchedImage: the value is derived from an image found in Freight
- LiteralValue: the value is written as given, no Freight lookup

so the resolver never has to re-check whether an image was configured.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .freight import OriginRef


class ValueKind(str, Enum):
    """Tokens selecting which part of a resolved image is written."""
    IMAGE_AND_TAG = "ImageAndTag"
    TAG = "Tag"
    IMAGE_AND_DIGEST = "ImageAndDigest"
    DIGEST = "Digest"

    @classmethod
    def values(cls) -> list[str]:
        return [k.value for k in cls]


@dataclass(frozen=True)
class MatchedImage:
    """
    An entry whose value comes from Freight.

    Attributes:
        key: Dot-delimited path in the values file
        repo_url: Image repository to look up
        value: Value-kind token (normally one of ValueKind)
        from_origin: Restrict the search to this origin
    """
    key: str
    repo_url: str
    value: str
    from_origin: Optional[OriginRef] = None


@dataclass(frozen=True)
class LiteralValue:
    """An entry whose value is assigned verbatim."""
    key: str
    value: str


ImageEntry = Union[MatchedImage, LiteralValue]


def _entry_from_dict(data: dict[str, Any]) -> ImageEntry:
    image = data.get("image") or ""
    if not image:
        return LiteralValue(key=data["key"], value=data["value"])
    from_origin = data.get("fromOrigin")
    return MatchedImage(
        key=data["key"],
        repo_url=image,
        value=data["value"],
        from_origin=OriginRef.from_dict(from_origin) if from_origin else None,
    )


@dataclass(frozen=True)
class StepConfig:
    """
    Configuration of one helm-update-image invocation.

    Attributes:
        path: Values file path, relative to the step's work directory
        images: Image entries in declaration order
    """
    path: str
    images: tuple[ImageEntry, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the raw configuration shape."""
        images = []
        for entry in self.images:
            if isinstance(entry, MatchedImage):
                item: dict[str, Any] = {
                    "key": entry.key,
                    "image": entry.repo_url,
                    "value": entry.value,
                }
                if entry.from_origin is not None:
                    item["fromOrigin"] = entry.from_origin.to_dict()
            else:
                item = {"key": entry.key, "value": entry.value}
            images.append(item)
        return {"path": self.path, "images": images}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StepConfig":
        """Build from an already validated raw configuration."""
        return cls(
            path=data["path"],
            images=tuple(_entry_from_dict(i) for i in data["images"]),
        )
