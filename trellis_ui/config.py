from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import tomllib
from typing import Literal


RenderPolicy = Literal["immediate", "deferred"]

CONFIG_TABLE = "trellis"


@dataclass(frozen=True)
class EngineConfig:
    """Numeric defaults shared by layout, scales and plots."""

    pad_proportion: float = 0.05
    identical_domain_padding: float = 1.0
    nice_count: int = 10
    num_ticks: int = 10
    table_max_iterations: int = 5
    hover_radius: float = 5.0
    mark_radius: float = 3.0
    mark_opacity: float = 0.6
    render_policy: RenderPolicy = "immediate"

    def __post_init__(self) -> None:
        if self.pad_proportion < 0:
            raise ValueError("pad_proportion must be >= 0")
        if self.identical_domain_padding <= 0:
            raise ValueError("identical_domain_padding must be > 0")
        if self.nice_count <= 0 or self.num_ticks <= 0:
            raise ValueError("nice_count/num_ticks must be > 0")
        if self.table_max_iterations <= 0:
            raise ValueError("table_max_iterations must be > 0")
        if self.hover_radius < 0 or self.mark_radius < 0:
            raise ValueError("hover_radius/mark_radius must be >= 0")
        if self.mark_opacity < 0.0 or self.mark_opacity > 1.0:
            raise ValueError("mark_opacity must be in [0, 1]")
        if self.render_policy not in ("immediate", "deferred"):
            raise ValueError(f"unknown render policy: {self.render_policy}")


DEFAULT_CONFIG = EngineConfig()


def load_config(path: str | Path) -> EngineConfig:
    """Read an `EngineConfig` from the `[trellis]` table of a TOML file.

    Keys that are absent keep their defaults; unknown keys are rejected.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"[{CONFIG_TABLE}] must be a table")

    known = {f.name: f for f in fields(EngineConfig)}
    values: dict[str, object] = {}
    for key, value in table.items():
        if key not in known:
            raise ValueError(f"unknown config key: {key}")
        default = getattr(DEFAULT_CONFIG, key)
        if isinstance(default, str):
            values[key] = _coerce_str(value, key)
        elif isinstance(default, int):
            values[key] = _coerce_int(value, key)
        else:
            values[key] = _coerce_float(value, key)
    return EngineConfig(**values)  # type: ignore[arg-type]


def _coerce_float(value: object, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number")
    return float(value)


def _coerce_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def _coerce_str(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value
