"""
Freight schemas - immutable provenance records consumed by promotion steps.

A FreightCollection maps an origin key ("<kind>/<name>") to the
FreightReference produced by that origin. Each reference lists the images
that origin has already verified.

A Warehouse is the live provenance object fetched from the object store.
Its subscriptions declare which image repositories it is allowed to produce
Freight for.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

WAREHOUSE = "Warehouse"


@dataclass(frozen=True)
class OriginRef:
    """
    Identifies a single provenance source.

    Attributes:
        kind: Origin kind (e.g. "Warehouse")
        name: Origin name within the project
    """
    kind: str
    name: str

    @property
    def key(self) -> str:
        """Key of this origin in a FreightCollection."""
        return f"{self.kind}/{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OriginRef":
        return cls(kind=data["kind"], name=data["name"])


@dataclass(frozen=True)
class ImageRecord:
    """A container image recorded in Freight."""
    repo_url: str
    tag: str = ""
    digest: str = ""

    def to_dict(self) -> dict[str, Any]:
        result = {"repoURL": self.repo_url}
        if self.tag:
            result["tag"] = self.tag
        if self.digest:
            result["digest"] = self.digest
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageRecord":
        return cls(
            repo_url=data["repoURL"],
            tag=data.get("tag", ""),
            digest=data.get("digest", ""),
        )


@dataclass(frozen=True)
class FreightReference:
    """
    The artifacts a single origin contributed to a promotion.

    Attributes:
        origin: Origin that produced the Freight
        images: Images recorded in the Freight, in recorded order
    """
    origin: OriginRef
    images: tuple[ImageRecord, ...] = field(default_factory=tuple)

    def find_image(self, repo_url: str) -> Optional[ImageRecord]:
        """Return the first image whose repository matches repo_url."""
        for image in self.images:
            if image.repo_url == repo_url:
                return image
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": self.origin.to_dict(),
            "images": [i.to_dict() for i in self.images],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FreightReference":
        return cls(
            origin=OriginRef.from_dict(data["origin"]),
            images=tuple(ImageRecord.from_dict(i) for i in data.get("images", [])),
        )


@dataclass(frozen=True)
class FreightCollection:
    """Freight available to a promotion, keyed by origin key."""
    freight: dict[str, FreightReference] = field(default_factory=dict)

    def get(self, origin: OriginRef) -> Optional[FreightReference]:
        return self.freight.get(origin.key)

    def to_dict(self) -> dict[str, Any]:
        return {k: v.to_dict() for k, v in self.freight.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FreightCollection":
        return cls(freight={k: FreightReference.from_dict(v) for k, v in (data or {}).items()})


@dataclass(frozen=True)
class ImageSubscription:
    """A warehouse's subscription to an image repository."""
    repo_url: str


@dataclass(frozen=True)
class Warehouse:
    """
    Live provenance object as returned by the object store.

    Only image subscriptions matter to promotion steps; subscriptions to
    other artifact types (git, charts) are dropped when parsing.
    """
    name: str
    namespace: str
    image_subscriptions: tuple[ImageSubscription, ...] = field(default_factory=tuple)

    def subscribes_to(self, repo_url: str) -> bool:
        """Check whether this warehouse declares an image subscription to repo_url."""
        return any(s.repo_url == repo_url for s in self.image_subscriptions)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Warehouse":
        """
        Parse a warehouse from its manifest form.

        Accepts both the flattened form ({name, namespace, subscriptions})
        and the Kubernetes form ({metadata: {...}, spec: {subscriptions}}).
        """
        metadata = data.get("metadata", data)
        spec = data.get("spec", data)
        subs = []
        for sub in spec.get("subscriptions") or []:
            image = sub.get("image")
            if image and image.get("repoURL"):
                subs.append(ImageSubscription(repo_url=image["repoURL"]))
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace", ""),
            image_subscriptions=tuple(subs),
        )
