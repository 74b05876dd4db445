"""Human-friendly output formatter for plans, apply reports and graphs."""

import os
from typing import List, Optional
from ..apply.models import ApplyReport, NodeStatus
from ..plan.models import Plan, PlanAction, PlanStep
from ..state.models import ResourceState

ACTION_SYMBOLS = {
    PlanAction.CREATE.value: "+",
    PlanAction.UPDATE.value: "~",
    PlanAction.DELETE.value: "-",
    PlanAction.NO_OP.value: " ",
}

STATUS_LABELS = {
    NodeStatus.APPLIED: ("✅", "[OK]"),
    NodeStatus.SKIPPED: ("⏭️ ", "[--]"),
    NodeStatus.FAILED: ("❌", "[FAIL]"),
    NodeStatus.BLOCKED: ("⛔", "[BLOCKED]"),
    NodeStatus.CANCELLED: ("⏹️ ", "[CANCELLED]"),
}


def _use_ascii(ascii_mode: Optional[bool] = None) -> bool:
    """Resolve whether to use ASCII output (checked at format time)."""
    if ascii_mode is not None:
        return bool(ascii_mode)
    return os.environ.get("INFRAGRAPH_ASCII", "").lower() in ("1", "true", "yes")


def _section(title: str, width: int = 65) -> List[str]:
    """Return section divider."""
    h = "-" * width
    return [h, title.center(width), h]


def _step_line(step: PlanStep) -> str:
    symbol = "-/+" if step.destructive else ACTION_SYMBOLS[step.action]
    line = f"  {symbol:>3} {step.address}"
    if step.destructive:
        line += " (replace)"
    if step.changed_attributes:
        line += f"  [{', '.join(step.changed_attributes)}]"
    return line


def format_plan(plan: Plan, show_unchanged: bool = False) -> str:
    """Render a plan as text, one line per step in execution order."""
    lines = _section("PLAN")
    steps = plan.steps if show_unchanged else plan.changes()

    if not steps:
        lines.append("No changes. Infrastructure matches the desired state.")
    else:
        lines.extend(_step_line(step) for step in steps)

    summary = plan.summary()
    lines.append("")
    lines.append(
        f"Plan: {summary['create']} to add, {summary['update']} to change "
        f"({summary['replace']} to replace), {summary['delete']} to destroy."
    )
    return "\n".join(lines)


def format_report(report: ApplyReport, ascii_mode: Optional[bool] = None) -> str:
    """Render an apply report as text."""
    use_ascii = _use_ascii(ascii_mode)
    lines = _section("APPLY")

    for result in report.results:
        label = STATUS_LABELS.get(result.status, ("", ""))[1 if use_ascii else 0]
        line = f"  {label} {result.address} ({result.action}): {result.status.value}"
        if result.status == NodeStatus.FAILED and result.reason:
            line += f" - {result.reason}"
        elif result.status == NodeStatus.BLOCKED and result.upstream:
            line += f" by {result.upstream}"
        if result.attempts > 1:
            line += f" after {result.attempts} attempts"
        lines.append(line)

    counts = report.summary()
    lines.append("")
    lines.append(
        f"Apply: {counts['applied']} applied, {counts['skipped']} unchanged, "
        f"{counts['failed']} failed, {counts['blocked']} blocked, {counts['cancelled']} cancelled."
    )
    return "\n".join(lines)


def format_order(order: List[str]) -> str:
    """Numbered dependency order."""
    width = len(str(len(order)))
    return "\n".join(f"{idx:>{width}}. {address}" for idx, address in enumerate(order, start=1))


def format_state_entry(entry: ResourceState) -> str:
    """Detailed view of one state entry."""
    lines = [
        f"# {entry.address}",
        f"provider_id:  {entry.provider_id}",
        f"last_applied: {entry.last_applied.isoformat()}",
    ]
    if entry.dependencies:
        lines.append(f"dependencies: {', '.join(entry.dependencies)}")
    lines.append("attributes:")
    lines.extend(f"  {key} = {value!r}" for key, value in sorted(entry.attributes.items()))
    if entry.outputs:
        lines.append("outputs:")
        lines.extend(f"  {key} = {value!r}" for key, value in sorted(entry.outputs.items()))
    return "\n".join(lines)
