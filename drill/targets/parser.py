"""Parses the delimited target file into an ordered list of DrillItems.

One item per line, four comma-separated fields in fixed order::

    key,display,image_path,category

Fields are trimmed.  Lines with any other field count are dropped with
a warning; blank lines are ignored.  Image paths and categories are not
validated here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from drill.config import TARGET_DELIMITER
from drill.errors import ConfigLoadError, EmptyTargetList
from drill.targets.types import DrillItem

logger = logging.getLogger(__name__)

_FIELD_COUNT = 4


def parse_targets(text: str) -> list[DrillItem]:
    """Parse raw target-file text.  Never raises; may return an empty list."""
    items: list[DrillItem] = []

    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue

        fields = [field.strip() for field in line.split(TARGET_DELIMITER)]
        if len(fields) != _FIELD_COUNT:
            logger.warning(
                "Dropping malformed target line %d (%d fields, expected %d): %r",
                line_no,
                len(fields),
                _FIELD_COUNT,
                line,
            )
            continue

        key, display, image_path, category = fields
        items.append(
            DrillItem(
                key=key,
                display=display,
                image_path=image_path,
                category=category,
            )
        )

    return items


def load_targets(path: Path) -> list[DrillItem]:
    """Read and parse the target file at *path*.

    Raises ConfigLoadError if the file cannot be read and EmptyTargetList
    if it holds no valid lines.
    """
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise ConfigLoadError(
            f"Could not find {path}. Did you name it correctly?"
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"Could not read {path}: {exc}") from exc

    items = parse_targets(text)
    if not items:
        raise EmptyTargetList("Targets file is empty or formatted incorrectly.")

    logger.info("Loaded %d targets from %s", len(items), path)
    return items
