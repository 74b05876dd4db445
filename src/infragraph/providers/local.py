"""In-process provider that simulates a cloud control plane."""

import copy
import ipaddress
import json
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from ..utils.errors import ProviderError
from ..utils.files import atomic_write_json
from ..utils.logging import get_logger
from .base import Provider

logger = get_logger("providers.local")

EXTRA_OUTPUTS = {
    "compute_subnetwork": lambda name, attrs: {"gateway_address": _gateway(attrs.get("ip_cidr_range"))},
    "container_cluster": lambda name, attrs: {"endpoint": f"https://{name}.cluster.local"},
    "sql_database_instance": lambda name, attrs: {"connection_name": f"{attrs.get('region', 'local')}:{name}"},
    "cloud_run_service": lambda name, attrs: {"url": f"https://{name}.run.local"},
    "cloudfunctions_function": lambda name, attrs: {"https_trigger_url": f"https://functions.local/{name}"},
}


def _gateway(cidr: Any) -> Optional[str]:
    """First host address of a CIDR range."""
    try:
        return str(next(ipaddress.ip_network(str(cidr)).hosts()))
    except (ValueError, StopIteration):
        return None


@dataclass
class _Fault:
    """Injected failure for matching calls."""
    operation: Optional[str]
    resource_type: str
    name: Optional[str]
    error: ProviderError
    remaining: Optional[int]


class LocalProvider(Provider):
    """
    Provider backed by a dict (optionally persisted to a JSON file).

    Identifiers are '<type>/<name>' when the resource declares a name,
    '<type>/<n>' otherwise. Outputs include 'id', 'name' and 'self_link'.
    """

    def __init__(self, project: str = "local", path: Optional[str] = None, latency: float = 0.0):
        self.project = project
        self.path = Path(path) if path else None
        self.latency = latency
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str, str]] = []
        self._faults: List[_Fault] = []
        self._counter = 0
        self._lock = threading.Lock()

        if self.path and self.path.exists():
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self.objects = data.get("objects", {})
                self._counter = data.get("counter", 0)
            except (OSError, json.JSONDecodeError) as e:
                raise ProviderError("STORE_UNREADABLE", f"Cannot read local provider store {self.path}: {e}")

    def inject_failure(
        self,
        resource_type: str,
        error: ProviderError,
        times: Optional[int] = 1,
        name: Optional[str] = None,
        operation: Optional[str] = None
    ) -> None:
        """
        Make matching calls raise `error`.

        Args:
            resource_type: Type tag to match
            error: Error to raise
            times: Number of calls to fail (None = every call)
            name: Only match resources with this 'name' attribute
            operation: Only match 'create', 'update' or 'delete'
        """
        self._faults.append(_Fault(operation, resource_type, name, error, times))

    def _check_faults(self, operation: str, resource_type: str, name: Optional[str]) -> None:
        for fault in self._faults:
            if fault.remaining == 0:
                continue
            if fault.operation not in (None, operation) or fault.resource_type != resource_type:
                continue
            if fault.name is not None and fault.name != name:
                continue
            if fault.remaining is not None:
                fault.remaining -= 1
            raise fault.error

    def _outputs(self, resource_type: str, provider_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        name = attributes.get("name") or provider_id.split("/", 1)[1]
        outputs = {
            "id": provider_id,
            "name": name,
            "self_link": f"projects/{self.project}/{resource_type}/{name}",
        }
        extra = EXTRA_OUTPUTS.get(resource_type)
        if extra:
            outputs.update(extra(name, attributes))
        return outputs

    def _persist(self) -> None:
        if self.path:
            atomic_write_json(self.path, {"objects": self.objects, "counter": self._counter})

    def create(self, resource_type: str, attributes: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        if self.latency:
            time.sleep(self.latency)
        with self._lock:
            self._check_faults("create", resource_type, attributes.get("name"))
            self._counter += 1
            suffix = attributes.get("name") or str(self._counter)
            provider_id = f"{resource_type}/{suffix}"
            if provider_id in self.objects:
                raise ProviderError("ALREADY_EXISTS", f"{provider_id} already exists")
            outputs = self._outputs(resource_type, provider_id, attributes)
            self.objects[provider_id] = {
                "type": resource_type,
                "attributes": copy.deepcopy(attributes),
                "outputs": outputs,
            }
            self.calls.append(("create", resource_type, provider_id))
            self._persist()
        logger.debug(f"Created {provider_id}")
        return provider_id, dict(outputs)

    def update(self, resource_type: str, provider_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        if self.latency:
            time.sleep(self.latency)
        with self._lock:
            self._check_faults("update", resource_type, attributes.get("name"))
            if provider_id not in self.objects:
                raise ProviderError("NOT_FOUND", f"{provider_id} does not exist")
            outputs = self._outputs(resource_type, provider_id, attributes)
            self.objects[provider_id].update(attributes=copy.deepcopy(attributes), outputs=outputs)
            self.calls.append(("update", resource_type, provider_id))
            self._persist()
        logger.debug(f"Updated {provider_id}")
        return dict(outputs)

    def delete(self, resource_type: str, provider_id: str) -> None:
        if self.latency:
            time.sleep(self.latency)
        with self._lock:
            existing = self.objects.get(provider_id)
            name = existing["attributes"].get("name") if existing else None
            self._check_faults("delete", resource_type, name)
            if existing is None:
                raise ProviderError("NOT_FOUND", f"{provider_id} does not exist")
            del self.objects[provider_id]
            self.calls.append(("delete", resource_type, provider_id))
            self._persist()
        logger.debug(f"Deleted {provider_id}")
