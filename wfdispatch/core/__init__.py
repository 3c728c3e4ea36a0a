"""
Core package for wfdispatch.
Lightweight package init to avoid import cycles.

Consumers should import submodules directly, e.g.:
  from wfdispatch.core.dispatcher import dispatch
  from wfdispatch.core.workflows import Workflow, filter_eligible
"""

__all__: list[str] = []
