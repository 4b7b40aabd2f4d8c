"""Generated index serialization.

The index lists every successfully generated page in discovery order so a
host can enumerate routes without scanning the source tree. It is plain
JSON::

    {
      "version": 1,
      "pages": [
        {"source": "index.md", "route": "/", "output": "index.razor", ...}
      ]
    }

The document holds no timestamps or machine-specific paths, so it is
identical across runs over the same sources and options.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from .models import GeneratedIndexEntry

INDEX_VERSION = 1


def serialize_index(entries: Iterable[GeneratedIndexEntry]) -> str:
    """Return the JSON text of the index, ending with a newline."""
    payload = {
        "version": INDEX_VERSION,
        "pages": [entry.to_dict() for entry in entries],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def write_index(entries: Iterable[GeneratedIndexEntry], index_path: Path) -> None:
    """Write the index to ``index_path``.

    Raises
    ------
    OSError
        If the file cannot be written.
    """
    with index_path.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(serialize_index(entries))


def read_index(text: str) -> list[GeneratedIndexEntry]:
    """Parse index text into entries, preserving order.

    Raises
    ------
    ValueError
        If the text is not valid JSON or does not have the index shape.
    """
    data = json.loads(text)
    if not isinstance(data, dict) or not isinstance(data.get("pages"), list):
        raise ValueError("Generated index must be an object with a 'pages' list.")
    entries: list[GeneratedIndexEntry] = []
    for item in data["pages"]:
        if not isinstance(item, dict):
            raise ValueError(f"Generated index entry must be an object: {item!r}")
        entries.append(GeneratedIndexEntry.from_dict(item))
    return entries
