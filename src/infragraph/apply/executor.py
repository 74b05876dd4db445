"""Apply executor - walk a plan in dependency order through a provider."""

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential
from ..plan.models import Plan, PlanAction, PlanStep
from ..providers.base import Provider
from ..registry.models import Reference, parse_attributes
from ..registry.registry import ResourceRegistry
from ..resources.catalog import ResourceTypeRegistry
from ..state.models import ResourceState, utc_now
from ..state.store import StateStore
from ..utils.errors import (
    ConfigurationError,
    InfraGraphError,
    PartialApplyError,
    ProviderError,
    ReferenceResolutionError,
    StateError,
)
from ..utils.logging import get_logger
from .models import FAILURE_STATUSES, SUCCESS_STATUSES, ApplyReport, NodeStatus, StepResult

logger = get_logger("apply.executor")


class RetryPolicy(BaseModel):
    """Bounded exponential backoff for retryable provider errors."""
    max_attempts: int = Field(default=5, ge=1, description="Total attempts per provider call")
    multiplier: float = Field(default=1.0, ge=0, description="Backoff multiplier in seconds")
    min_wait: float = Field(default=1.0, ge=0, description="Minimum wait between attempts")
    max_wait: float = Field(default=30.0, ge=0, description="Maximum wait between attempts")


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, ProviderError) and error.retryable


class ApplyExecutor:
    """
    Executes plan steps with bounded parallelism.

    A step starts only after every step it depends on was applied or skipped.
    A failed step blocks its transitive dependents; independent branches keep
    going. abort() stops scheduling while in-flight provider calls finish.
    """

    def __init__(
        self,
        provider: Provider,
        types: ResourceTypeRegistry,
        state: StateStore,
        concurrency: int = 1,
        retry_policy: Optional[RetryPolicy] = None
    ):
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {concurrency}")
        self.provider = provider
        self.types = types
        self.state = state
        self.concurrency = concurrency
        self.retry_policy = retry_policy or RetryPolicy()
        self._abort = threading.Event()

    def abort(self) -> None:
        """Stop scheduling new steps; in-flight steps run to completion."""
        if not self._abort.is_set():
            logger.warning("Abort requested: no new steps will be scheduled")
        self._abort.set()

    @property
    def aborted(self) -> bool:
        return self._abort.is_set()

    def execute(self, plan: Plan, registry: Optional[ResourceRegistry] = None) -> ApplyReport:
        """
        Execute a plan.

        Args:
            plan: Plan from the plan engine
            registry: Desired-state registry (required for create/update steps)

        Returns:
            ApplyReport when every step was applied or skipped

        Raises:
            PartialApplyError: If any step failed, was blocked or was cancelled
        """
        results: Dict[str, StepResult] = {}
        statuses: Dict[str, NodeStatus] = {step.address: NodeStatus.PENDING for step in plan.steps}
        pending: List[PlanStep] = list(plan.steps)
        in_flight: Dict[Future, PlanStep] = {}

        logger.info(f"Applying {len(plan.steps)} steps (concurrency: {self.concurrency})")

        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="infragraph-apply") as pool:
            while True:
                self._block_failed_dependents(pending, statuses, results)

                if not self._abort.is_set() and self._schedule(pending, statuses, results, in_flight, pool, registry):
                    continue

                if not in_flight:
                    break

                try:
                    done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                except KeyboardInterrupt:
                    self.abort()
                    continue

                for future in done:
                    step = in_flight.pop(future)
                    result = self._collect(future, step)
                    results[step.address] = result
                    statuses[step.address] = result.status

        for step in pending:
            statuses[step.address] = NodeStatus.CANCELLED
            results[step.address] = StepResult(
                address=step.address,
                action=step.action,
                status=NodeStatus.CANCELLED,
                reason="apply aborted before this step was scheduled"
            )

        report = ApplyReport(results=[results[step.address] for step in plan.steps])
        logger.info(f"Apply finished: {report.summary()}")

        if not report.ok:
            raise PartialApplyError(report)
        return report

    def _block_failed_dependents(
        self,
        pending: List[PlanStep],
        statuses: Dict[str, NodeStatus],
        results: Dict[str, StepResult]
    ) -> None:
        # Plan order respects depends_on, so one pass reaches transitive dependents.
        for step in list(pending):
            upstream = next(
                (dep for dep in step.depends_on if statuses.get(dep) in FAILURE_STATUSES),
                None
            )
            if upstream is None:
                continue
            pending.remove(step)
            statuses[step.address] = NodeStatus.BLOCKED
            results[step.address] = StepResult(
                address=step.address,
                action=step.action,
                status=NodeStatus.BLOCKED,
                reason=f"upstream {upstream} did not succeed",
                upstream=upstream
            )
            logger.warning(f"{step.address}: blocked by {upstream}")

    def _schedule(
        self,
        pending: List[PlanStep],
        statuses: Dict[str, NodeStatus],
        results: Dict[str, StepResult],
        in_flight: Dict[Future, PlanStep],
        pool: ThreadPoolExecutor,
        registry: Optional[ResourceRegistry]
    ) -> bool:
        """Start ready steps; returns True when a no-op was settled inline."""
        for step in list(pending):
            if not all(statuses.get(dep, NodeStatus.APPLIED) in SUCCESS_STATUSES for dep in step.depends_on):
                continue

            if step.action == PlanAction.NO_OP:
                pending.remove(step)
                results[step.address] = self._skip(step)
                statuses[step.address] = NodeStatus.SKIPPED
                return True

            if len(in_flight) >= self.concurrency:
                break

            pending.remove(step)
            statuses[step.address] = NodeStatus.APPLYING
            logger.debug(f"{step.address}: applying ({step.action})")
            in_flight[pool.submit(self._run_step, step, registry)] = step
        return False

    def _collect(self, future: Future, step: PlanStep) -> StepResult:
        try:
            result = future.result()
        except InfraGraphError as e:
            logger.error(f"{step.address}: {step.action} failed: {e}")
            return StepResult(address=step.address, action=step.action, status=NodeStatus.FAILED, reason=str(e))
        except Exception as e:
            logger.error(f"{step.address}: unexpected error during {step.action}: {e}", exc_info=True)
            return StepResult(address=step.address, action=step.action, status=NodeStatus.FAILED, reason=str(e))

        logger.info(f"{step.address}: {step.action} applied")
        return result

    def _skip(self, step: PlanStep) -> StepResult:
        with self.state.entry_lock(step.address):
            entry = self.state.get(step.address)
            if entry is not None and entry.dependencies != step.depends_on:
                entry.dependencies = list(step.depends_on)
                self.state.put(entry)
        logger.debug(f"{step.address}: unchanged")
        return StepResult(
            address=step.address,
            action=step.action,
            status=NodeStatus.SKIPPED,
            provider_id=entry.provider_id if entry else None
        )

    def _run_step(self, step: PlanStep, registry: Optional[ResourceRegistry]) -> StepResult:
        """Worker body: one provider operation (two for replacements) plus state update."""
        handler = self.types.get(step.type)
        attempts = [0]

        with self.state.entry_lock(step.address):
            prior = self.state.get(step.address)

            if step.action == PlanAction.DELETE:
                if prior is None:
                    raise StateError(f"{step.address} is not in state")
                self._call(step, attempts, handler.apply, self.provider, "delete", prior.provider_id, {})
                self.state.remove(step.address)
                return StepResult(
                    address=step.address,
                    action=step.action,
                    status=NodeStatus.APPLIED,
                    provider_id=prior.provider_id,
                    attempts=attempts[0]
                )

            if registry is None or step.address not in registry:
                raise ConfigurationError(f"{step.address} has no definition in the desired state")
            node = registry.get_by_address(step.address)
            resolved = self._resolve(node.attributes)

            if step.action == PlanAction.CREATE or prior is None:
                provider_id, outputs = self._call(step, attempts, handler.apply, self.provider, "create", None, resolved)
            elif step.destructive:
                self._call(step, attempts, handler.apply, self.provider, "delete", prior.provider_id, {})
                self.state.remove(step.address)
                provider_id, outputs = self._call(step, attempts, handler.apply, self.provider, "create", None, resolved)
            else:
                provider_id, outputs = self._call(
                    step, attempts, handler.apply, self.provider, "update", prior.provider_id, resolved
                )

            self.state.put(ResourceState(
                type=node.type,
                name=node.name,
                attributes=node.declared_attributes(),
                outputs=outputs,
                provider_id=provider_id,
                dependencies=list(step.depends_on),
                last_applied=utc_now()
            ))
            node.provider_id = provider_id

        return StepResult(
            address=step.address,
            action=step.action,
            status=NodeStatus.APPLIED,
            provider_id=provider_id,
            attempts=attempts[0]
        )

    def _call(self, step: PlanStep, attempts: List[int], fn, *args) -> Tuple[Optional[str], Dict[str, Any]]:
        """Call a provider operation, retrying retryable ProviderErrors with backoff."""
        policy = self.retry_policy

        def counted(*call_args):
            attempts[0] += 1
            return fn(*call_args)

        def log_retry(retry_state) -> None:
            error = retry_state.outcome.exception()
            logger.warning(
                f"{step.address}: attempt {retry_state.attempt_number}/{policy.max_attempts} "
                f"failed ({error}); retrying"
            )

        retrying = Retrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(multiplier=policy.multiplier, min=policy.min_wait, max=policy.max_wait),
            before_sleep=log_retry,
            reraise=True
        )
        return retrying(counted, *args)

    def _resolve(self, value: Any) -> Any:
        """Replace References with values recorded in state."""
        if isinstance(value, Reference):
            return self._lookup(value)
        if isinstance(value, dict):
            return {k: self._resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve(v) for v in value]
        return value

    def _lookup(self, ref: Reference) -> Any:
        entry = self.state.get(ref.address)
        if entry is None:
            raise ReferenceResolutionError(f"Cannot resolve {ref}: {ref.address} has not been applied")
        if ref.attribute == "id":
            return entry.provider_id
        if ref.attribute in entry.outputs:
            return entry.outputs[ref.attribute]
        if ref.attribute in entry.attributes:
            return self._resolve(parse_attributes(entry.attributes[ref.attribute]))
        raise ReferenceResolutionError(f"Cannot resolve {ref}: {ref.address} has no attribute '{ref.attribute}'")
