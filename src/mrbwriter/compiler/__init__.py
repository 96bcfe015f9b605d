"""Remote compiler service access."""

from mrbwriter.compiler.client import CompilerClient

__all__ = ["CompilerClient"]
