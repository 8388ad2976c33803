# ABOUTME: JSON output sink shared by the API client and the CLI exports.
# ABOUTME: Writes UTF-8 JSON with Arabic text kept readable rather than escaped.

import json
from pathlib import Path
from typing import Any


def write_json(data: Any, path: Path, *, indent: int | None = 2) -> Path:
    """Write ``data`` to ``path``, creating parent directories.

    ``indent=None`` gives compact single-line output.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=indent), encoding="utf-8")
    return path
