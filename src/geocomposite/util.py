"""Utility helpers for logging, JSON output and zoom ranges."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure root logging to console and optionally a file."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True, ensure_ascii=False)
        fh.write("\n")


def inclusive_steps(start: float, stop: float, step: float) -> list[float]:
    """`start, start + step, ...` up to and including `stop`, without float drift."""
    if not step > 0:
        raise ValueError(f"step must be positive, got {step!r}")
    if stop < start:
        raise ValueError(f"stop ({stop!r}) must not be below start ({start!r})")
    count = int(math.floor((stop - start) / step + 1e-9))
    return [round(start + idx * step, 12) for idx in range(count + 1)]
