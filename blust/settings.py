"""Library settings and initialisation."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from .cpu_ops import CpuOps, set_ops

VERSION = "0.0.1"
DEFAULT_THREADS = 8


@dataclass
class Settings:
    """Where the program lives and which device it was started for."""

    path: Path = field(default_factory=Path)
    device: str = ""
    version: ClassVar[str] = VERSION

    @classmethod
    def from_argv(cls, argv: Sequence[str]) -> Settings:
        """Build settings from a command line; the program path is ``argv[0]``."""
        if not argv:
            raise ValueError("argv must hold at least the program path")
        return cls(path=Path(argv[0]).parent)


_settings: Settings | None = None


def init(argv: Sequence[str] | None = None, device: str = "") -> Settings:
    """Initialise the library: settings and the CPU operation backend.

    ``device`` names the requested backend ("cpu", "cuda" or "optimized");
    it is recorded, and computation always runs on the CPU.
    """
    global _settings
    settings = Settings.from_argv(sys.argv if argv is None else argv)
    settings.device = device
    _settings = settings
    set_ops(CpuOps(DEFAULT_THREADS))
    return settings


def get_settings() -> Settings:
    """Return the settings made by ``init``."""
    if _settings is None:
        raise RuntimeError("settings are not initialised; call init() first")
    return _settings