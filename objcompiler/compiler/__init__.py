"""Public compiler entry points.

Use :class:`objcompiler.compiler.core.ObjectCreationCompiler` as the stable API.
"""

from objcompiler.compiler.core import ObjectCreationCompiler

__all__ = ["ObjectCreationCompiler"]
