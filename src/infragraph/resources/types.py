"""Built-in resource types."""

import ipaddress
from typing import Any, Dict, List
from ..registry.models import Reference
from .base import ResourceType


class ComputeNetwork(ResourceType):
    type_name = "compute_network"


class ComputeSubnetwork(ResourceType):
    type_name = "compute_subnetwork"

    def validate(self, attributes: Dict[str, Any]) -> List[str]:
        problems = super().validate(attributes)
        cidr = attributes.get("ip_cidr_range")
        if cidr is not None and not isinstance(cidr, Reference):
            try:
                ipaddress.ip_network(str(cidr))
            except ValueError:
                problems.append(f"ip_cidr_range '{cidr}' is not a valid network")
        return problems


class ContainerCluster(ResourceType):
    type_name = "container_cluster"

    def validate(self, attributes: Dict[str, Any]) -> List[str]:
        problems = super().validate(attributes)
        node_count = attributes.get("initial_node_count")
        if node_count is not None and not isinstance(node_count, Reference):
            if not isinstance(node_count, int) or isinstance(node_count, bool) or node_count < 1:
                problems.append("initial_node_count must be a positive integer")
        return problems


class SqlDatabaseInstance(ResourceType):
    type_name = "sql_database_instance"


class FirestoreDatabase(ResourceType):
    type_name = "firestore_database"


class CloudRunService(ResourceType):
    type_name = "cloud_run_service"


class PubsubTopic(ResourceType):
    type_name = "pubsub_topic"


class CloudFunction(ResourceType):
    type_name = "cloudfunctions_function"

    def validate(self, attributes: Dict[str, Any]) -> List[str]:
        problems = super().validate(attributes)
        entry_point = attributes.get("entry_point")
        if "entry_point" in attributes and not isinstance(entry_point, Reference):
            if not isinstance(entry_point, str) or not entry_point.strip():
                problems.append("entry_point must be a non-empty string")
        return problems


class ComputeSecurityPolicy(ResourceType):
    type_name = "compute_security_policy"

    def validate(self, attributes: Dict[str, Any]) -> List[str]:
        problems = super().validate(attributes)
        rules = attributes.get("rules", [])
        if not isinstance(rules, list):
            return problems + ["rules must be a list"]
        seen = set()
        for idx, rule in enumerate(rules):
            priority = rule.get("priority") if isinstance(rule, dict) else None
            if not isinstance(priority, int) or isinstance(priority, bool):
                problems.append(f"rules[{idx}] needs an integer priority")
            elif priority in seen:
                problems.append(f"duplicate rule priority {priority}")
            else:
                seen.add(priority)
        return problems


BUILTIN_TYPES = {
    cls.type_name: cls
    for cls in (
        ComputeNetwork,
        ComputeSubnetwork,
        ContainerCluster,
        SqlDatabaseInstance,
        FirestoreDatabase,
        CloudRunService,
        PubsubTopic,
        CloudFunction,
        ComputeSecurityPolicy,
    )
}
