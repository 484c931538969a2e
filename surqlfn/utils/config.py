"""YAML configuration for the loader, code generator and concurrency helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

__all__ = ["DEFAULT_CONFIG_PATH", "Settings", "load_config", "load_settings"]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "default.yaml"


@dataclass(frozen=True, slots=True)
class Settings:
    """Effective settings after merging a YAML file over the defaults."""

    suffix: str = ".surql"
    parallel: bool = True
    alias: str = "is"
    concurrency: Mapping[str, Any] | None = None

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-``None`` override applied."""

        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the parsed YAML mapping located at ``path``.

    Missing files raise :class:`FileNotFoundError`; documents whose root is not
    a mapping raise :class:`ValueError`.  An empty document yields ``{}``.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """Build :class:`Settings` from ``path`` or the bundled default file.

    An explicit ``path`` must exist; the bundled default is optional so an
    installed package without the ``configs`` directory still works.
    """

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return Settings()
        path = DEFAULT_CONFIG_PATH
    data = load_config(path)
    loader = data.get("loader") or {}
    codegen = data.get("codegen") or {}
    concurrency = data.get("concurrency")
    if not isinstance(loader, Mapping) or not isinstance(codegen, Mapping):
        raise ValueError("'loader' and 'codegen' sections must be mappings")
    defaults = Settings()
    return Settings(
        suffix=str(loader.get("suffix", defaults.suffix)),
        parallel=bool(loader.get("parallel", defaults.parallel)),
        alias=str(codegen.get("alias", defaults.alias)),
        concurrency=concurrency if isinstance(concurrency, Mapping) else None,
    )
