"""Read-side selector base for the tax kernel."""

from tax_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
