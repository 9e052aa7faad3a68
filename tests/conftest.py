import pytest

from promostep.context import StepContext
from promostep.schemas import (
    FreightCollection,
    FreightReference,
    ImageRecord,
    ImageSubscription,
    OriginRef,
    WAREHOUSE,
    Warehouse,
)
from promostep.warehouse_client import InMemoryWarehouseClient

PROJECT = "test-project"
NGINX = "docker.io/library/nginx"


class FailingWarehouseClient:
    """Warehouse client whose every lookup fails."""

    def __init__(self, message: str = "something went wrong"):
        self.message = message
        self.calls: list[tuple[str, str]] = []

    def get_warehouse(self, project, name):
        self.calls.append((project, name))
        raise RuntimeError(self.message)


def make_warehouse(name: str, *repo_urls: str, namespace: str = PROJECT) -> Warehouse:
    return Warehouse(
        name=name,
        namespace=namespace,
        image_subscriptions=tuple(ImageSubscription(repo_url=u) for u in repo_urls),
    )


def make_freight(*refs: FreightReference) -> FreightCollection:
    return FreightCollection(freight={r.origin.key: r for r in refs})


def make_ref(name: str, *images: ImageRecord, kind: str = WAREHOUSE) -> FreightReference:
    return FreightReference(origin=OriginRef(kind=kind, name=name), images=tuple(images))


@pytest.fixture
def warehouse_client():
    return InMemoryWarehouseClient([make_warehouse("test-warehouse", NGINX)])


@pytest.fixture
def freight():
    return make_freight(make_ref("test-warehouse", ImageRecord(repo_url=NGINX, tag="1.19.0")))


@pytest.fixture
def step_ctx(tmp_path, warehouse_client, freight):
    return StepContext(
        project=PROJECT,
        work_dir=tmp_path,
        warehouse_client=warehouse_client,
        freight=freight,
        freight_requests=(OriginRef(kind=WAREHOUSE, name="test-warehouse"),),
    )


@pytest.fixture(autouse=True)
def promostep_home(tmp_path_factory, monkeypatch):
    """Keep every test away from the user's real promostep home."""
    home = tmp_path_factory.mktemp("promostep_home")
    monkeypatch.setenv("PROMOSTEP_HOME", str(home))
    return home
