"""
procurement_services.workflow_executor -- Workflow transition execution.

Responsibility:
    Executes state transitions declared with the kernel workflow types:
    finds the transition for (state, action), evaluates its guard, and
    emits a structured ``workflow_transition`` trace record for every
    outcome.  Thin coordinator -- guard logic lives in registered
    evaluators, state ownership stays with the caller.

Architecture position:
    Services layer.  May import from procurement_engines/ (pure engines)
    and procurement_kernel/ (domain, logging, exceptions).
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from procurement_kernel.domain.workflow import Guard, Transition, TransitionResult, Workflow
from procurement_kernel.exceptions import GuardFailedError, InvalidTransitionError
from procurement_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.workflow_executor")

TRACE_TYPE_WORKFLOW_TRANSITION = "WORKFLOW_TRANSITION"
OUTCOME_SUCCESS = "success"
OUTCOME_GUARD_FAILED = "guard_failed"
OUTCOME_NO_TRANSITION = "no_transition"


def _emit_workflow_trace(
    workflow_name: str,
    action: str,
    entity_type: str,
    entity_id: UUID,
    from_state: str,
    outcome: str,
    reason: str,
    duration_ms: float,
    to_state: str | None = None,
) -> None:
    """Emit a structured workflow transition record."""
    record: dict[str, Any] = {
        "trace_type": TRACE_TYPE_WORKFLOW_TRANSITION,
        "workflow": workflow_name,
        "action": action,
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "from_state": from_state,
        "outcome": outcome,
        "reason": reason,
        "duration_ms": round(duration_ms, 3),
    }
    if to_state is not None:
        record["to_state"] = to_state
    record.update(LogContext.get_all())
    logger.info("workflow_transition", extra=record)


# ---------------------------------------------------------------------------
# Guard evaluation
# ---------------------------------------------------------------------------


def _return_quantity_available(context: Mapping[str, Any]) -> bool:
    """Return approval: requested quantity still fits within what is returnable."""
    qty = context.get("return_quantity")
    limit = context.get("max_returnable")
    if qty is None or limit is None:
        return False
    return Decimal(str(qty)) <= Decimal(str(limit))


def _no_pending_returns(context: Mapping[str, Any]) -> bool:
    return not context.get("has_pending_returns", True)


class GuardExecutor:
    """Evaluates workflow guards against a context mapping.

    Guards are declared on transitions (name + description).  This executor
    holds the evaluation logic per guard name.  A guard with no registered
    evaluator fails closed.
    """

    def __init__(self) -> None:
        self._evaluators: dict[str, Callable[[Mapping[str, Any]], bool]] = {}

    def register(self, guard_name: str, evaluator: Callable[[Mapping[str, Any]], bool]) -> None:
        """Register an evaluator for a guard by name."""
        self._evaluators[guard_name] = evaluator

    def evaluate(self, guard: Guard, context: Mapping[str, Any] | None = None) -> bool:
        """Evaluate a guard against context. Returns True if guard passes."""
        fn = self._evaluators.get(guard.name)
        if fn is None:
            logger.warning("guard_no_evaluator", extra={"guard_name": guard.name})
            return False
        return bool(fn(context or {}))


def default_guard_executor() -> GuardExecutor:
    """Return a GuardExecutor with the returns-domain evaluators registered."""
    ex = GuardExecutor()
    ex.register("return_quantity_available", _return_quantity_available)
    ex.register("no_pending_returns", _no_pending_returns)
    return ex


# ---------------------------------------------------------------------------
# WorkflowExecutor
# ---------------------------------------------------------------------------


class WorkflowExecutor:
    """Executes workflow transitions with guard evaluation.

    ``execute_transition`` reports failure in its result;
    ``require_transition`` raises the typed workflow errors instead.
    """

    def __init__(self, guard_executor: GuardExecutor | None = None) -> None:
        self._guard_executor = guard_executor or default_guard_executor()

    def execute_transition(
        self,
        workflow: Workflow,
        entity_type: str,
        entity_id: UUID,
        current_state: str,
        action: str,
        context: Mapping[str, Any] | None = None,
    ) -> TransitionResult:
        """Execute a state transition.

        Returns a ``TransitionResult`` with ``success=False`` when no
        transition matches or the guard rejects it.
        """
        t0 = time.monotonic()

        transition = self._find_transition(workflow, current_state, action)
        if transition is None:
            reason = (
                f"No transition from '{current_state}' via action '{action}' "
                f"in workflow '{workflow.name}'"
            )
            _emit_workflow_trace(
                workflow_name=workflow.name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                from_state=current_state,
                outcome=OUTCOME_NO_TRANSITION,
                reason=reason,
                duration_ms=(time.monotonic() - t0) * 1000,
            )
            return TransitionResult(success=False, reason=reason)

        if transition.guard is not None and not self._guard_executor.evaluate(
            transition.guard, context
        ):
            reason = f"Guard '{transition.guard.name}' not satisfied: {transition.guard.description}"
            _emit_workflow_trace(
                workflow_name=workflow.name,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                from_state=current_state,
                outcome=OUTCOME_GUARD_FAILED,
                reason=reason,
                duration_ms=(time.monotonic() - t0) * 1000,
            )
            return TransitionResult(success=False, guard=transition.guard.name, reason=reason)

        _emit_workflow_trace(
            workflow_name=workflow.name,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            from_state=current_state,
            outcome=OUTCOME_SUCCESS,
            reason="",
            duration_ms=(time.monotonic() - t0) * 1000,
            to_state=transition.to_state,
        )
        return TransitionResult(success=True, new_state=transition.to_state)

    def require_transition(
        self,
        workflow: Workflow,
        entity_type: str,
        entity_id: UUID,
        current_state: str,
        action: str,
        context: Mapping[str, Any] | None = None,
    ) -> str:
        """Execute a transition and return the new state, raising on failure.

        Raises:
            InvalidTransitionError: No transition for (current_state, action).
            GuardFailedError: The transition's guard rejected it.
        """
        result = self.execute_transition(
            workflow, entity_type, entity_id, current_state, action, context,
        )
        if result.success:
            return result.new_state
        if result.guard is not None:
            raise GuardFailedError(workflow.name, action, result.guard)
        raise InvalidTransitionError(workflow.name, current_state, action)

    @staticmethod
    def _find_transition(
        workflow: Workflow,
        current_state: str,
        action: str,
    ) -> Transition | None:
        for t in workflow.transitions:
            if t.from_state == current_state and t.action == action:
                return t
        return None
