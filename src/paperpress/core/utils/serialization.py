"""
Serialization Utilities

JSON file helpers shared by the bank loader, the template catalog and
the command line script. Files are UTF-8 with non-ASCII text kept as-is
(question banks carry Urdu and mathematical symbols).
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any


def load_json(path: Path) -> Any:
    """
    Read a JSON file.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the content is not valid JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Any, path: Path) -> None:
    """
    Write data as indented JSON atomically, creating parent directories.

    The JSON goes to a temp file in the same directory which then
    replaces path, so an existing file is either fully replaced or left
    untouched.

    Args:
        data: JSON-serializable value
        path: Output path

    Raises:
        TypeError / ValueError: If data is not JSON-serializable
        OSError: If the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".json",
        dir=path.parent,
        delete=False,
        encoding="utf-8",
    ) as f:
        temp_path = Path(f.name)
        try:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        except BaseException:
            f.close()
            temp_path.unlink(missing_ok=True)
            raise

    # replace() overwrites an existing file on all platforms
    temp_path.replace(path)


def dumps(data: Any) -> str:
    """Serialize to the same indented form save_json() writes."""
    return json.dumps(data, indent=2, ensure_ascii=False)
