"""
Utils package for the SLIDEM processor.

Currently only the shared pint unit registry and the annotated quantity types
used to document physical constants in `slidem.config`.
"""

from .units import ureg

__all__ = ["ureg"]
