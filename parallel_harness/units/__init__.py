from parallel_harness.units.base import SkipUnit, TestUnit
from parallel_harness.units.registry import list_registered, register, units_for

__all__ = ["SkipUnit", "TestUnit", "list_registered", "register", "units_for"]
