"""Read defect records from JSON files on disk."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from dupcheck.models import Defect


def iter_defect_files(directory: Union[str, Path]) -> List[Path]:
    """Return the ``*.json`` files in ``directory`` in sorted order.

    Raises:
        FileNotFoundError: If ``directory`` does not exist.
    """
    path = Path(directory)
    if not path.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")
    return sorted(path.glob("*.json"))


def load_defect_file(path: Union[str, Path]) -> Defect:
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    return Defect.from_payload(payload)
