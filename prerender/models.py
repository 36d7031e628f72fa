"""Pydantic models for render requests, results and manifests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RenderRequest(BaseModel):
    """One component to instantiate in a render batch."""

    component_name: str = Field(
        ..., alias="name", min_length=1, description="Exported factory to instantiate."
    )
    data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Initial data handed verbatim to the component as options.data.",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("data", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("data")
    @classmethod
    def _json_serializable(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        # The instantiation program embeds data as a JSON literal.
        try:
            json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"data must be JSON-serializable: {exc}") from exc
        return value


class RenderResult(BaseModel):
    """Rendered markup and captured style text for one request."""

    name: str = Field(..., description="Component name of the originating request.")
    markup: str = Field(..., description="Serialized HTML of the component's target container.")
    style: Optional[str] = Field(
        None, description="Style text the component emitted, or None when it emitted none."
    )


class RenderManifest(BaseModel):
    """Schema for render manifests consumed by the CLI."""

    bundle: Optional[Path] = Field(
        None, description="Compiled bundle, relative to the manifest file."
    )
    components: List[RenderRequest] = Field(
        default_factory=list, description="Render requests in instantiation order."
    )
    by_name: bool = Field(
        False,
        alias="byName",
        description="Key results by component name instead of returning a list.",
    )

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["RenderManifest", "RenderRequest", "RenderResult"]
