"""Tests for promostep schemas.

Tests cover:
- OriginRef keys and round trips
- FreightReference image lookup
- Warehouse parsing (flattened and Kubernetes form)
- StepConfig conversion into MatchedImage / LiteralValue
- StepResult invariants and serialization
"""

import pytest

from promostep.schemas import (
    FreightCollection,
    FreightReference,
    ImageRecord,
    LiteralValue,
    MatchedImage,
    OriginRef,
    StepConfig,
    StepResult,
    StepStatus,
    ValueKind,
    Warehouse,
)


# -----------------------------------------------------------------------------
# Freight
# -----------------------------------------------------------------------------


class TestOriginRef:
    """Tests for OriginRef."""

    def test_key(self):
        assert OriginRef(kind="Warehouse", name="test-warehouse").key == "Warehouse/test-warehouse"

    def test_from_dict(self):
        origin = OriginRef.from_dict({"kind": "Warehouse", "name": "w"})
        assert origin == OriginRef(kind="Warehouse", name="w")

    def test_is_hashable(self):
        assert len({OriginRef("Warehouse", "a"), OriginRef("Warehouse", "a")}) == 1


class TestFreightReference:
    """Tests for FreightReference."""

    def test_find_image_first_match_wins(self):
        ref = FreightReference(
            origin=OriginRef("Warehouse", "w"),
            images=(
                ImageRecord(repo_url="docker.io/library/nginx", tag="1.19.0"),
                ImageRecord(repo_url="docker.io/library/nginx", tag="1.20.0"),
            ),
        )
        assert ref.find_image("docker.io/library/nginx").tag == "1.19.0"

    def test_find_image_missing(self):
        ref = FreightReference(origin=OriginRef("Warehouse", "w"))
        assert ref.find_image("docker.io/library/nginx") is None

    def test_from_dict(self):
        ref = FreightReference.from_dict({
            "origin": {"kind": "Warehouse", "name": "w"},
            "images": [{"repoURL": "repo", "digest": "sha256:abc"}],
        })
        assert ref.images == (ImageRecord(repo_url="repo", tag="", digest="sha256:abc"),)


class TestFreightCollection:
    """Tests for FreightCollection."""

    def test_get_by_origin(self):
        collection = FreightCollection.from_dict({
            "Warehouse/w": {"origin": {"kind": "Warehouse", "name": "w"}, "images": []},
        })
        assert collection.get(OriginRef("Warehouse", "w")) is not None
        assert collection.get(OriginRef("Warehouse", "other")) is None

    def test_from_none(self):
        assert FreightCollection.from_dict(None).freight == {}

    def test_to_dict(self):
        data = {
            "Warehouse/w": {
                "origin": {"kind": "Warehouse", "name": "w"},
                "images": [{"repoURL": "repo", "tag": "1.0"}],
            },
        }
        assert FreightCollection.from_dict(data).to_dict() == data


class TestWarehouse:
    """Tests for Warehouse parsing."""

    def test_flattened_form(self):
        warehouse = Warehouse.from_dict({
            "name": "w",
            "namespace": "p",
            "subscriptions": [{"image": {"repoURL": "docker.io/library/nginx"}}],
        })
        assert warehouse.name == "w"
        assert warehouse.namespace == "p"
        assert warehouse.subscribes_to("docker.io/library/nginx")

    def test_kubernetes_form(self):
        warehouse = Warehouse.from_dict({
            "apiVersion": "kargo.akuity.io/v1alpha1",
            "kind": "Warehouse",
            "metadata": {"name": "w", "namespace": "p"},
            "spec": {"subscriptions": [{"image": {"repoURL": "docker.io/library/nginx"}}]},
        })
        assert warehouse.namespace == "p"
        assert warehouse.subscribes_to("docker.io/library/nginx")

    def test_non_image_subscriptions_dropped(self):
        warehouse = Warehouse.from_dict({
            "name": "w",
            "subscriptions": [
                {"git": {"repoURL": "https://github.com/acme/app"}},
                {"chart": {"repoURL": "oci://ghcr.io/acme/charts"}},
            ],
        })
        assert warehouse.image_subscriptions == ()
        assert not warehouse.subscribes_to("https://github.com/acme/app")


# -----------------------------------------------------------------------------
# StepConfig
# -----------------------------------------------------------------------------


class TestStepConfig:
    """Tests for StepConfig.from_dict."""

    def test_matched_image(self):
        cfg = StepConfig.from_dict({
            "path": "values.yaml",
            "images": [{"key": "image.tag", "image": "nginx", "value": "Tag"}],
        })
        assert cfg.images == (MatchedImage(key="image.tag", repo_url="nginx", value="Tag"),)

    def test_matched_image_with_origin(self):
        cfg = StepConfig.from_dict({
            "path": "values.yaml",
            "images": [{
                "key": "image.tag",
                "image": "nginx",
                "value": "Tag",
                "fromOrigin": {"kind": "Warehouse", "name": "w"},
            }],
        })
        assert cfg.images[0].from_origin == OriginRef("Warehouse", "w")

    @pytest.mark.parametrize("entry", [
        {"key": "image.tag", "value": "fake-tag"},
        {"key": "image.tag", "value": "fake-tag", "image": ""},
    ])
    def test_literal_value(self, entry):
        cfg = StepConfig.from_dict({"path": "values.yaml", "images": [entry]})
        assert cfg.images == (LiteralValue(key="image.tag", value="fake-tag"),)

    def test_keeps_declaration_order(self):
        cfg = StepConfig.from_dict({
            "path": "values.yaml",
            "images": [
                {"key": "b", "value": "1"},
                {"key": "a", "image": "nginx", "value": "Digest"},
            ],
        })
        assert [e.key for e in cfg.images] == ["b", "a"]

    def test_to_dict_round_trip(self):
        raw = {
            "path": "values.yaml",
            "images": [
                {"key": "a", "image": "nginx", "value": "Tag",
                 "fromOrigin": {"kind": "Warehouse", "name": "w"}},
                {"key": "b", "value": "literal"},
            ],
        }
        assert StepConfig.from_dict(raw).to_dict() == raw

    def test_is_immutable(self):
        cfg = StepConfig(path="values.yaml")
        with pytest.raises(Exception):
            cfg.path = "other.yaml"


class TestValueKind:
    """Tests for ValueKind tokens."""

    def test_values(self):
        assert ValueKind.values() == ["ImageAndTag", "Tag", "ImageAndDigest", "Digest"]

    def test_compares_to_plain_string(self):
        assert ValueKind.TAG == "Tag"


# -----------------------------------------------------------------------------
# StepResult
# -----------------------------------------------------------------------------


class TestStepResult:
    """Tests for StepResult."""

    def test_succeeded_to_dict(self):
        result = StepResult(status=StepStatus.SUCCEEDED, output={"commitMessage": "msg"})
        assert result.ok
        assert result.to_dict() == {"status": "Succeeded", "output": {"commitMessage": "msg"}}

    def test_errored_to_dict(self):
        result = StepResult(status=StepStatus.ERRORED, error="boom")
        assert not result.ok
        assert result.to_dict() == {"status": "Errored", "output": {}, "error": "boom"}

    def test_succeeded_cannot_carry_error(self):
        with pytest.raises(ValueError, match="must not carry an error"):
            StepResult(status=StepStatus.SUCCEEDED, error="boom")
