"""Game settings read from a key=value file."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Union

_LINE = re.compile(r"([^=]{1,49})=\s*([+-]?\d+)")

_SCALAR_KEYS = frozenset(
    {
        "max_score",
        "max_time",
        "rate_of_decrease_min",
        "rate_of_decrease_max",
        "re_join_time_min",
        "re_join_time_max",
        "win_threshold",
    }
)

_ENERGY_KEYS = {
    f"initial_energy_{bound}_{letter}": (f"initial_energy_{bound}", index)
    for bound in ("max", "min")
    for index, letter in enumerate("abcd")
}


def _zeros() -> list[int]:
    return [0, 0, 0, 0]


@dataclass
class Config:
    """Limits and ranges that drive a match; unset values are zero."""

    max_score: int = 0
    max_time: int = 0
    initial_energy_max: list[int] = field(default_factory=_zeros)
    initial_energy_min: list[int] = field(default_factory=_zeros)
    rate_of_decrease_min: int = 0
    rate_of_decrease_max: int = 0
    re_join_time_min: int = 0
    re_join_time_max: int = 0
    win_threshold: int = 0


def parse_config(text: str) -> Config:
    """Build a Config from file text; comments, blanks and unknown keys are skipped."""
    config = Config()
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        match = _LINE.match(line)
        if not match:
            continue
        key, value = match.group(1), int(match.group(2))
        if key in _SCALAR_KEYS:
            setattr(config, key, value)
        elif key in _ENERGY_KEYS:
            name, index = _ENERGY_KEYS[key]
            getattr(config, name)[index] = value
    return config


def load_config(filename: Union[str, os.PathLike]) -> Config:
    """Read and parse a configuration file; OSError propagates if it cannot be read."""
    with open(filename, encoding="utf-8", errors="replace") as handle:
        return parse_config(handle.read())