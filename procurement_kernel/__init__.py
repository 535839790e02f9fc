"""
Procurement Kernel (``procurement_kernel``).

Shared infrastructure for the returns engine and module: structured logging,
the typed exception hierarchy, the injectable clock, workflow value types and
quantity parsing.  Nothing in the kernel imports from engines, services or
modules.
"""
