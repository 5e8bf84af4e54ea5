"""CSV loader for item pools."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path

import pandas as pd

from randomkarma.engine.models import Item, ItemPool

from .durations import DurationParseError, parse_lap_time

logger = logging.getLogger(__name__)


class ItemLoadError(ValueError):
    """Raised when the loader is misconfigured or a file cannot be decoded."""


class ItemPoolLoader:
    """Load ``(id, MM:SS.mmm)`` records from delimited text into an ``ItemPool``.

    Rows with too few columns, an empty id, a duplicate id or a malformed
    duration are logged and skipped; the rest of the file still loads.
    """

    def __init__(self, id_column: int = 0, time_column: int = 1, start_line: int = 1) -> None:
        if id_column < 0 or time_column < 0:
            raise ItemLoadError("Column indices must be >= 0.")
        if id_column == time_column:
            raise ItemLoadError("id_column and time_column must differ.")
        if start_line < 0:
            raise ItemLoadError("start_line must be >= 0.")
        self.id_column = id_column
        self.time_column = time_column
        self.start_line = start_line

    def load_csv(self, path: str | Path, encoding: str = "utf-8") -> ItemPool:
        """Read a CSV file and return the parsed pool."""
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")
        try:
            content = csv_path.read_text(encoding=encoding)
        except UnicodeDecodeError as exc:
            raise ItemLoadError(f"Cannot decode {csv_path} as {encoding}: {exc}") from exc
        return self.parse_text(content)

    def parse_text(self, content: str) -> ItemPool:
        """Parse CSV content already held in memory."""
        frame = self._read_frame(content)
        items: list[Item] = []
        seen_ids: set[str] = set()

        for position, (raw_id, raw_time) in enumerate(
            frame[[self.id_column, self.time_column]].itertuples(index=False, name=None)
        ):
            line_number = self.start_line + position + 1
            if pd.isna(raw_id) or pd.isna(raw_time):
                logger.debug("Line %d has fewer columns than required, skipping", line_number)
                continue

            item_id = str(raw_id).strip()
            if not item_id:
                logger.debug("Line %d has an empty id, skipping", line_number)
                continue
            if item_id in seen_ids:
                logger.debug("Duplicate id '%s' found on line %d, skipping", item_id, line_number)
                continue

            try:
                duration = parse_lap_time(str(raw_time).strip())
            except DurationParseError as exc:
                logger.debug("%s on line %d, skipping", exc, line_number)
                continue

            seen_ids.add(item_id)
            items.append(Item(item_id, duration))

        logger.info("Loaded %d items from CSV content", len(items))
        return ItemPool(tuple(items))

    def _read_frame(self, content: str) -> pd.DataFrame:
        required = max(self.id_column, self.time_column) + 1
        lines = content.splitlines()[self.start_line :]
        width = max([required, *(line.count(",") + 1 for line in lines)])
        if not lines:
            return pd.DataFrame(columns=list(range(width)))

        try:
            return pd.read_csv(
                io.StringIO("\n".join(lines)),
                header=None,
                names=list(range(width)),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                quoting=csv.QUOTE_NONE,
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=list(range(width)))
