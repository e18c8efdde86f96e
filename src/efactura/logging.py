"""Logging helpers: Excel issue reports and opt-in file logging.

The library itself only emits records on ``efactura.*`` loggers and never
installs handlers on import. Applications that want a log file call
:func:`configure_file_logging`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Protocol, Sequence

LOGGER_NAME = "efactura"
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RowLike(Protocol):
    """Protocol for rows serialisable to a worksheet."""

    def as_cells(self) -> Iterable[str]:
        """Return the ordered cell values."""


@dataclass(frozen=True)
class ExcelLoggerConfig:
    """Configuration used by :class:`ExcelLogger`."""

    columns: Sequence[str]
    filename: str = "efactura-report.xlsx"
    sheet_title: str = "Issues"


class ExcelLogger:
    """Write rows to an ``.xlsx`` workbook using :mod:`openpyxl`.

    Every call to :meth:`write_rows` creates a new workbook with the header
    from :class:`ExcelLoggerConfig`.
    """

    def __init__(self, config: ExcelLoggerConfig) -> None:
        self.config = config

    def write_rows(self, rows: Iterable[RowLike | Iterable[str]]) -> Path:
        """Persist ``rows`` and return the workbook path."""

        from openpyxl import Workbook

        destination = Path(self.config.filename)
        destination.parent.mkdir(parents=True, exist_ok=True)

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = self.config.sheet_title

        if self.config.columns:
            worksheet.append(list(self.config.columns))

        count = 0
        for row in rows:
            if hasattr(row, "as_cells"):
                cells = list(row.as_cells())  # type: ignore[union-attr]
            else:
                cells = list(row)  # type: ignore[arg-type]
            worksheet.append(cells)
            count += 1

        workbook.save(destination)
        logging.getLogger(f"{LOGGER_NAME}.report").info(
            "Wrote %d row(s) to %s", count, destination
        )
        return destination


def configure_file_logging(
    path: Path, *, level: int = logging.INFO, max_bytes: int = 1_000_000, backups: int = 5
) -> logging.Logger:
    """Attach a rotating file handler to the ``efactura`` logger once."""

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(LOGGER_NAME)
    target = str(path.resolve())
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
            return logger

    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backups,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = [
    "ExcelLogger",
    "ExcelLoggerConfig",
    "LOGGER_NAME",
    "RowLike",
    "configure_file_logging",
]
