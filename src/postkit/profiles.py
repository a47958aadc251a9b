from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from postkit.domain.errors import ProfileError
from postkit.domain.schema import REQUIRED_KEYS

DEFAULT_PROFILES_DIR = Path("profiles")
DEFAULT_PROFILE = "default"


@dataclass
class LintConfig:
    required_keys: list[str] = field(default_factory=lambda: list(REQUIRED_KEYS))
    require_excerpt: bool = False

    check_body: bool = True
    check_links: bool = True
    check_references: bool = True

    warnings_as_errors: bool = False
    disabled_rules: list[str] = field(default_factory=list)


def load_profile(name: str, profiles_dir: Path = DEFAULT_PROFILES_DIR) -> LintConfig:
    """
    Load profiles/<name>.json into a LintConfig.
    """
    path = profiles_dir / f"{name}.json"
    if not path.exists():
        raise ProfileError(f"Profile not found: {path}")

    try:
        profile = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProfileError(f"Invalid profile {path}: {e}") from e
    if not isinstance(profile, dict):
        raise ProfileError(f"Profile {path} must be a JSON object")

    config = LintConfig()

    # Apply only known keys (ignore extras)
    for k, v in profile.items():
        if hasattr(config, k):
            setattr(config, k, v)

    return config


def override_cfg(config: LintConfig, overrides: dict[str, Any]) -> LintConfig:
    """
    Apply CLI overrides on top of a config. None means "not given".
    """
    new_config = LintConfig(**asdict(config))
    for k, v in overrides.items():
        if v is None:
            continue
        if hasattr(new_config, k):
            setattr(new_config, k, v)
    return new_config
