"""Custom exception classes for infragraph."""

from typing import List, Optional


class InfraGraphError(Exception):
    """Base exception for all infragraph errors."""
    pass


class ConfigurationError(InfraGraphError):
    """Raised for invalid resource definitions, settings or documents.

    Always raised before any provider call is made.
    """
    pass


class DuplicateResourceError(ConfigurationError):
    """Raised when a (type, name) pair is registered twice."""

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"Resource already registered: {resource_type}.{name}")


class UnknownResourceError(ConfigurationError):
    """Raised when a resource lookup misses the registry."""

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"Unknown resource: {resource_type}.{name}")


class UnresolvedReferenceError(ConfigurationError):
    """Raised when a reference points at a resource outside the graph."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"{source} references {target}, which is not declared")


class CyclicDependencyError(ConfigurationError):
    """Raised when the resource graph contains a cycle."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")


class ResourceValidationError(ConfigurationError):
    """Raised when a resource's attributes fail its type's validation."""

    def __init__(self, address: str, problems: List[str]):
        self.address = address
        self.problems = problems
        super().__init__(f"Invalid resource {address}: {'; '.join(problems)}")


class ProviderError(InfraGraphError):
    """Raised by providers when a remote operation fails."""

    def __init__(self, code: str, message: str, retryable: bool = False):
        self.code = code
        self.message = message
        self.retryable = retryable
        super().__init__(f"[{code}] {message}")


class ReferenceResolutionError(InfraGraphError):
    """Raised when a reference has no value in state at apply time."""
    pass


class StateError(InfraGraphError):
    """Raised when the state file cannot be read or written."""
    pass


class PartialApplyError(InfraGraphError):
    """Raised when an apply run finishes with failed, blocked or cancelled steps."""

    def __init__(self, report, message: Optional[str] = None):
        self.report = report
        self.applied = report.applied()
        self.failed = report.failed()
        self.blocked = report.blocked()
        if message is None:
            message = (
                f"Apply incomplete: {len(self.applied)} applied, "
                f"{len(self.failed)} failed ({', '.join(self.failed) or '-'}), "
                f"{len(self.blocked)} blocked ({', '.join(self.blocked) or '-'})"
            )
        super().__init__(message)
