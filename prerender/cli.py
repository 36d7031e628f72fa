"""Command-line driver: render components from a compiled bundle to JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from pydantic import ValidationError

from .errors import PrerenderError
from .io_utils import read_config, stable_json_dumps, warn, write_json_stable
from .models import RenderManifest, RenderRequest
from .render import Renderer


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render compiled components to static HTML.")
    parser.add_argument("--bundle", type=Path, default=None, help="Path to the compiled component bundle")
    parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="YAML or JSON manifest listing the bundle and the components to render",
    )
    parser.add_argument(
        "--component",
        action="append",
        dest="components",
        default=[],
        help="Component to render (repeatable); rendered after any manifest components.",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="JSON object passed as data to the single --component given.",
    )
    parser.add_argument(
        "--by-name",
        action="store_true",
        help="Key results by component name; a repeated name keeps only its last result.",
    )
    parser.add_argument("--out", type=Path, default=None, help="Write JSON results here instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _load_manifest(path: Path) -> RenderManifest:
    try:
        payload = read_config(path) or {}
    except OSError as exc:
        raise SystemExit(f"Cannot read manifest {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid manifest {path}: {exc}") from exc
    try:
        manifest = RenderManifest.model_validate(payload)
    except ValidationError as exc:
        raise SystemExit(f"Invalid manifest {path}: {exc}") from exc

    if manifest.bundle is not None and not manifest.bundle.is_absolute():
        manifest = manifest.model_copy(update={"bundle": path.parent / manifest.bundle})
    return manifest


def _requests_from_args(args: argparse.Namespace) -> List[RenderRequest]:
    if args.data is not None and len(args.components) != 1:
        raise SystemExit("--data requires exactly one --component.")

    data = {}
    if args.data is not None:
        try:
            data = json.loads(args.data)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"--data is not valid JSON: {exc}") from exc

    try:
        return [RenderRequest(name=name, data=data) for name in args.components]
    except ValidationError as exc:
        raise SystemExit(f"Invalid component request: {exc}") from exc


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    manifest = _load_manifest(args.manifest) if args.manifest else RenderManifest()
    requests = list(manifest.components) + _requests_from_args(args)
    bundle_path = args.bundle or manifest.bundle
    by_name = args.by_name or manifest.by_name

    if bundle_path is None:
        raise SystemExit("A bundle is required: pass --bundle or set 'bundle' in the manifest.")
    if not requests:
        raise SystemExit("Nothing to render: pass --component or list components in the manifest.")

    try:
        renderer = Renderer.from_path(bundle_path)
    except OSError as exc:
        raise SystemExit(f"Cannot read bundle {bundle_path}: {exc}") from exc

    try:
        if by_name:
            results = renderer.render_by_name(requests)
            payload = {name: result.model_dump() for name, result in results.items()}
        else:
            payload = [result.model_dump() for result in renderer.render(requests)]
    except PrerenderError as exc:
        warn(str(exc))
        sys.exit(1)

    if args.out:
        write_json_stable(args.out, payload)
        print(f"Rendered {len(requests)} component(s) into {args.out}")
        return
    sys.stdout.write(stable_json_dumps(payload))


if __name__ == "__main__":
    main()
