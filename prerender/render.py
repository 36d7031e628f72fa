"""Render orchestration: requests in, serialized markup and styles out."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Union, overload

from jinja2 import Environment, StrictUndefined

from .dom_model import node_to_html
from .io_utils import read_text
from .models import RenderRequest, RenderResult
from .sandbox import RenderContext

logger = logging.getLogger(__name__)

RequestLike = Union[RenderRequest, Mapping[str, Any]]

PROGRAM_TEMPLATE = """
{% for mount in mounts %}
__mount({{ mount.name|tojson }}, {{ mount.key|tojson }}, {{ mount.data|tojson }});
{% endfor %}
"""


def _program_env() -> Environment:
    env = Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    # Keep the caller's key order for data objects.
    env.policies["json.dumps_kwargs"] = {"sort_keys": False}
    return env


_PROGRAM = _program_env().from_string(PROGRAM_TEMPLATE)


def binding_key(name: str, index: int) -> str:
    """Unique target and style key for the request at ``index``.

    The index follows the last colon, so keys stay distinct even when
    component names themselves end in digits.
    """
    return f"{name}:{index}"


def coerce_request(request: RequestLike) -> RenderRequest:
    if isinstance(request, RenderRequest):
        return request
    return RenderRequest.model_validate(request)


def build_program(requests: Sequence[RenderRequest]) -> str:
    """Instantiation statements, one per request, in request order."""
    mounts = [
        {"name": request.component_name, "key": binding_key(request.component_name, index), "data": request.data}
        for index, request in enumerate(requests)
    ]
    return _PROGRAM.render(mounts=mounts)


def render_batch(source: str, requests: Sequence[RenderRequest], filename: str) -> List[RenderResult]:
    """Run every request in one fresh context and collect results in order."""
    logger.debug("rendering %d component(s) from %s", len(requests), filename)
    context = RenderContext(filename)
    keys = [binding_key(request.component_name, index) for index, request in enumerate(requests)]
    for key in keys:
        context.register_target(key)

    context.run(source, build_program(requests))

    return [
        RenderResult(
            name=request.component_name,
            markup=node_to_html(context.target(key)),
            style=context.style(key),
        )
        for request, key in zip(requests, keys)
    ]


@dataclass
class Renderer:
    """Compiled bundle source plus the filename used in diagnostics."""

    source: str
    filename: str = "<bundle>"

    @classmethod
    def from_path(cls, path: Path) -> "Renderer":
        return cls(source=read_text(path), filename=str(path))

    @overload
    def render(self, requests: RequestLike) -> RenderResult: ...

    @overload
    def render(self, requests: Iterable[RequestLike]) -> List[RenderResult]: ...

    def render(self, requests):
        """Render one request or a sequence of them.

        The result mirrors the input: a single request gives a single result,
        a sequence gives a list in the same order.
        """
        if isinstance(requests, (RenderRequest, Mapping)):
            return render_batch(self.source, [coerce_request(requests)], self.filename)[0]
        batch = [coerce_request(request) for request in requests]
        return render_batch(self.source, batch, self.filename)

    def render_by_name(self, requests: Iterable[RequestLike]) -> Dict[str, RenderResult]:
        """Render a batch and key results by component name.

        Every occurrence renders into its own target, but when a name repeats
        the later result replaces the earlier one in the returned mapping.
        Use :meth:`render` to keep all occurrences.
        """
        if isinstance(requests, (RenderRequest, Mapping)):
            requests = [requests]
        results: Dict[str, RenderResult] = {}
        for result in self.render(list(requests)):
            results[result.name] = result
        return results


def render(source: str, requests, *, filename: str = "<bundle>"):
    return Renderer(source, filename).render(requests)


def render_by_name(
    source: str, requests: Iterable[RequestLike], *, filename: str = "<bundle>"
) -> Dict[str, RenderResult]:
    return Renderer(source, filename).render_by_name(requests)


__all__ = [
    "Renderer",
    "binding_key",
    "build_program",
    "coerce_request",
    "render",
    "render_batch",
    "render_by_name",
]
