"""Render configuration save/load for JSON files."""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from temsim.model import RenderConfig

_CONFIG_FIELDS = frozenset(f.name for f in fields(RenderConfig))
_NULLABLE_CONFIG_FIELDS = frozenset({"low_clip", "high_clip", "focal_z"})

_VALID_SECTIONS = frozenset({"render_config"})


def resolve_config(
    config: RenderConfig | None = None,
    **kwargs: Any,
) -> RenderConfig:
    """Build a :class:`RenderConfig` from an optional base plus overrides.

    Any kwarg whose name matches a ``RenderConfig`` field replaces that
    field's value.  Passing ``None`` is treated as "not provided" and
    keeps the base value, except for the fields where ``None`` means
    something (``low_clip``, ``high_clip`` and ``focal_z``), which take
    it as an explicit override.

    Raises:
        TypeError: If a kwarg name does not match any ``RenderConfig``
            field.
    """
    unknown = kwargs.keys() - _CONFIG_FIELDS
    if unknown:
        raise TypeError(
            f"Unknown config keyword argument(s): {', '.join(sorted(unknown))}"
        )

    base = config if config is not None else RenderConfig()
    overrides = {
        k: v for k, v in kwargs.items()
        if v is not None or k in _NULLABLE_CONFIG_FIELDS
    }
    if overrides:
        base = replace(base, **overrides)
    return base


def save_config(path: str | Path, config: RenderConfig) -> None:
    """Save a render configuration to a JSON file.

    Only settings that differ from the defaults are written, under a
    ``"render_config"`` section.  The file is human-readable with
    two-space indentation.
    """
    data = {"render_config": config.to_dict()}
    Path(path).write_text(json.dumps(data, indent=2) + "\n")


def load_config(path: str | Path) -> RenderConfig:
    """Load a render configuration from a JSON file.

    A missing ``"render_config"`` section gives the defaults.

    Raises:
        ValueError: If the file contains unknown top-level keys or
            unknown configuration fields.
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(
            f"config file must hold a JSON object, got {type(data).__name__}"
        )

    unknown = set(data) - _VALID_SECTIONS
    if unknown:
        raise ValueError(
            f"unknown top-level keys in config file: {sorted(unknown)}"
        )
    return RenderConfig.from_dict(data.get("render_config", {}))
