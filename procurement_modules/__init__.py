"""
Procurement Modules.

Thin orchestration layers over the procurement kernel and engines.
Each module contains:
- Domain models (the nouns)
- Workflows (state machines)
- Policies (validation rules)
- Configuration schemas (policy and settings)

Modules:
- Returns: Return requests against received line items, receipt, short close

Actual quantity logic lives in the engines.
"""

from procurement_modules import returns

__all__ = ["returns"]
