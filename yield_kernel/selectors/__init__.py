"""Read-only selectors."""

from yield_kernel.selectors.base import BaseSelector
from yield_kernel.selectors.yield_selector import YieldSelector

__all__ = ["BaseSelector", "YieldSelector"]
