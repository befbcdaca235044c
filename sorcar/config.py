"""
Configuration file loader for ``.sorcar.yml``.

Provides defaults so a round runs without any config file, while letting a
verification project pin its algorithm and round policy next to its sources.
Command-line flags override whatever the file says.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import InvalidArgumentError

ALGORITHMS = (
    "horndini",
    "sorcar",
    "sorcar-first",
    "sorcar-greedy",
    "sorcar-minimal",
)


def _get(raw: dict[str, Any], key: str, default: Any) -> Any:
    """Look up ``key`` accepting both dashed and underscored spellings."""
    return raw.get(key.replace("_", "-"), raw.get(key, default))


@dataclass
class SorcarConfig:
    """Settings of one learning round."""
    algorithm: str = "sorcar"
    reset_r: bool = False
    horndini_first_round: bool = False
    alternate: bool = False
    check_consistency: bool = True
    solver_timeout_ms: Optional[int] = None
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.algorithm not in ALGORITHMS:
            raise InvalidArgumentError(
                f"Unknown algorithm '{self.algorithm}' "
                f"(expected one of {', '.join(ALGORITHMS)})"
            )

    @classmethod
    def load(cls, directory: Path) -> "SorcarConfig":
        """Load config from .sorcar.yml in ``directory``, falling back to defaults."""
        config_path = directory / ".sorcar.yml"
        if not config_path.exists():
            config_path = directory / ".sorcar.yaml"
        if not config_path.exists():
            return cls()
        return cls.from_file(config_path)

    @classmethod
    def from_file(cls, path: Path) -> "SorcarConfig":
        with open(path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise InvalidArgumentError(f"{path}: invalid YAML: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidArgumentError(f"{path}: expected a mapping at top level")
        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, raw: dict[str, Any]) -> "SorcarConfig":
        timeout = _get(raw, "solver_timeout_ms", None)
        return cls(
            algorithm=str(_get(raw, "algorithm", "sorcar")),
            reset_r=bool(_get(raw, "reset_r", False)),
            horndini_first_round=bool(_get(raw, "horndini_first_round", False)),
            alternate=bool(_get(raw, "alternate", False)),
            check_consistency=bool(_get(raw, "check_consistency", True)),
            solver_timeout_ms=int(timeout) if timeout is not None else None,
            log_file=_get(raw, "log_file", None),
        )

    def with_overrides(self, **overrides: Any) -> "SorcarConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_yaml(self) -> str:
        """Serialise to YAML string."""
        return yaml.safe_dump({
            "algorithm": self.algorithm,
            "reset-r": self.reset_r,
            "horndini-first-round": self.horndini_first_round,
            "alternate": self.alternate,
            "check-consistency": self.check_consistency,
            "solver-timeout-ms": self.solver_timeout_ms,
            "log-file": self.log_file,
        }, sort_keys=False)
