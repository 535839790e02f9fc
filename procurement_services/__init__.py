"""
Procurement services (``procurement_services``).

Stateful coordinators that sit between the pure engines and the modules.
"""

from procurement_services.workflow_executor import (
    GuardExecutor,
    WorkflowExecutor,
    default_guard_executor,
)

__all__ = [
    "GuardExecutor",
    "WorkflowExecutor",
    "default_guard_executor",
]
