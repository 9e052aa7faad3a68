"""
Warehouse client interface for provenance lookups.

Promotion steps never trust an image reference on its own: the warehouse
that produced the Freight must have declared a subscription to that image
repository. This module defines the lookup capability the step consumes,
so the resolver is decoupled from the actual object store.

Implementations:
- InMemoryWarehouseClient: For testing and embedding
- FileWarehouseClient: Reads warehouse manifests from a YAML file (CLI)
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable

import yaml

from promostep.schemas import Warehouse

logger = logging.getLogger(__name__)


@runtime_checkable
class WarehouseClient(Protocol):
    """
    Protocol for fetching warehouses from the object store.

    get_warehouse returns None when the warehouse does not exist. Any
    exception it raises (transport failure, cancellation, permission
    denied) is treated by callers as fatal.
    """

    def get_warehouse(self, project: str, name: str) -> Optional[Warehouse]:
        """
        Fetch a warehouse by project (namespace) and name.

        Args:
            project: Project the warehouse lives in
            name: Warehouse name

        Returns:
            The warehouse, or None if it does not exist
        """
        ...


class InMemoryWarehouseClient:
    """
    In-memory warehouse store.

    Records every lookup in `calls` so tests can assert on store traffic.
    """

    def __init__(self, warehouses: Iterable[Warehouse] = ()):
        self._warehouses: dict[tuple[str, str], Warehouse] = {}
        self.calls: list[tuple[str, str]] = []
        for warehouse in warehouses:
            self.add(warehouse)

    def add(self, warehouse: Warehouse) -> None:
        self._warehouses[(warehouse.namespace, warehouse.name)] = warehouse

    def get_warehouse(self, project: str, name: str) -> Optional[Warehouse]:
        self.calls.append((project, name))
        return self._warehouses.get((project, name))


class FileWarehouseClient(InMemoryWarehouseClient):
    """
    Warehouse store backed by a YAML file.

    The file holds a list of warehouse manifests, either flattened
    ({name, namespace, subscriptions}) or in Kubernetes form
    ({metadata, spec}); a top-level {items: [...]} list is accepted too.
    """

    def __init__(self, path: Path, default_namespace: str = ""):
        self.path = Path(path)
        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or []
        if isinstance(data, dict):
            data = data.get("items", [])

        warehouses = []
        for item in data:
            warehouse = Warehouse.from_dict(item)
            if not warehouse.namespace and default_namespace:
                warehouse = Warehouse(
                    name=warehouse.name,
                    namespace=default_namespace,
                    image_subscriptions=warehouse.image_subscriptions,
                )
            warehouses.append(warehouse)

        super().__init__(warehouses)
        logger.debug("Loaded %d warehouse(s) from %s", len(warehouses), self.path)
