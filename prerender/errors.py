"""Exceptions raised while rendering component bundles."""

from __future__ import annotations


class PrerenderError(Exception):
    """Base class for rendering failures."""


class ExecutionFailure(PrerenderError):
    """The bundle or the generated instantiation program threw while running.

    The diagnostic filename of the bundle is kept on the exception so callers
    can trace the failure back to the source that produced it. Nothing from the
    failed batch is salvaged.
    """

    def __init__(self, filename: str, cause: object) -> None:
        super().__init__(f"{filename}: {cause}")
        self.filename = filename
        self.cause = cause


class UnresolvedReference(ExecutionFailure):
    """A request named a component the bundle does not export."""

    def __init__(self, filename: str, component_name: str, cause: object) -> None:
        super().__init__(filename, cause)
        self.component_name = component_name


class MalformedTree(PrerenderError):
    """Serialization met a node kind the document emulator never produces."""
