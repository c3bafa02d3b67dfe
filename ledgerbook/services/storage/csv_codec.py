"""
Flat-File Ledger Codec

DESIGN DECISION: The ledger is persisted as a comma-separated text file
because:
1. Users can open and fix it in any spreadsheet or text editor
2. Other tools can append rows without knowing about this program
3. A whole-file rewrite is cheap at personal-ledger sizes

TRADEOFFS:
- Hand-edited files contain mistakes, so decoding is row-tolerant:
  each bad row becomes a RowDiagnostic and the rest of the file is kept
- No partial writes: encode goes through a temporary file and an atomic
  rename, so an interrupted save leaves the previous file intact

Categories containing the delimiter are written with RFC-4180 quoting.
One physical line is one record; quoted newlines are not supported.
"""

import csv
import os
import re
import tempfile
from contextlib import suppress
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

import structlog
from pydantic import ValidationError

from ledgerbook.models.entry import Entry, EntryKind
from ledgerbook.models.records import LoadResult, RowDiagnostic
from ledgerbook.services.storage.interface import (
    EntryStorageInterface,
    RecordIOError,
    RecordNotFoundError,
    RowParseError,
)

logger = structlog.get_logger(__name__)

HEADER = ["Amount", "Date", "Category", "Kind"]

TIMESTAMP_FORMATS = ("iso", "epoch")

EPOCH_PATTERN = re.compile(r"^[+-]?\d+$")

# Older files wrote the enum ordinal instead of the name.
KIND_TOKENS = {
    "INCOME": EntryKind.INCOME,
    "0": EntryKind.INCOME,
    "EXPENSE": EntryKind.EXPENSE,
    "1": EntryKind.EXPENSE,
}

Source = Union[str, os.PathLike, TextIO]


def parse_amount(text: str) -> Decimal:
    text = text.strip()
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise RowParseError(f"Amount is not a number: {text!r}")
    if not value.is_finite():
        raise RowParseError(f"Amount must be a finite number: {text!r}")
    if value <= 0:
        raise RowParseError(f"Amount must be greater than zero: {text!r}")
    return value


def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 date/date-time or an integer epoch in seconds.

    A value made only of digits is always read as an epoch. Results are
    naive local datetimes.
    """
    text = text.strip()
    if EPOCH_PATTERN.match(text):
        try:
            return datetime.fromtimestamp(int(text))
        except (OverflowError, OSError, ValueError):
            raise RowParseError(f"Epoch timestamp out of range: {text!r}")

    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise RowParseError(f"Unrecognised date: {text!r}")

    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def parse_kind(text: str) -> EntryKind:
    token = text.strip().upper()
    try:
        return KIND_TOKENS[token]
    except KeyError:
        raise RowParseError(
            f"Kind must be INCOME, EXPENSE, 0 or 1, got {text.strip()!r}"
        )


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ())) or "entry"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


class CsvEntryCodec:
    """
    Converts between Entry lists and the ledger's text format.

    Reads both timestamp conventions; writes only the configured one.
    """

    def __init__(self, timestamp_format: str = "iso", encoding: str = "utf-8"):
        if timestamp_format not in TIMESTAMP_FORMATS:
            raise ValueError(
                f"timestamp_format must be one of {TIMESTAMP_FORMATS}, "
                f"got {timestamp_format!r}"
            )
        self._timestamp_format = timestamp_format
        self._encoding = encoding

    @property
    def timestamp_format(self) -> str:
        return self._timestamp_format

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, source: Source) -> LoadResult:
        """
        Decode a ledger file or an open text stream.

        Never raises for problems inside individual rows.

        Raises:
            RecordNotFoundError: If source is a path that does not exist
            RecordIOError: If the file exists but cannot be opened or read
        """
        if hasattr(source, "read"):
            return self._decode_lines(source, getattr(source, "name", "<stream>"))

        path = Path(source)
        try:
            # Undecodable bytes survive as surrogates so that decode_row can
            # reject just the affected row.
            with path.open(
                "r",
                encoding=self._encoding,
                errors="surrogateescape",
                newline="",
            ) as handle:
                return self._decode_lines(handle, str(path))
        except FileNotFoundError as e:
            raise RecordNotFoundError(str(path)) from e
        except OSError as e:
            raise RecordIOError(str(path), str(e)) from e

    def _decode_lines(self, lines: Iterable[str], location: str) -> LoadResult:
        result = LoadResult()
        header_seen = False

        for line_number, line in enumerate(lines, start=1):
            raw = line.rstrip("\r\n")

            if not header_seen:
                header_seen = True
                self._check_header(raw, location, result)
                continue

            if not raw.strip():
                continue

            result.total_lines += 1
            try:
                result.entries.append(self.decode_row(raw))
            except RowParseError as e:
                result.diagnostics.append(RowDiagnostic(
                    line_number=line_number,
                    message=str(e),
                    raw_line=self._printable(raw),
                ))
                logger.debug(
                    "row_rejected",
                    location=location,
                    line_number=line_number,
                    reason=str(e),
                )

        if not header_seen:
            result.warnings.append("File is empty; expected a header line")
            logger.warning("ledger_file_empty", location=location)

        logger.info(
            "ledger_decoded",
            location=location,
            entries=result.success_count,
            errors=result.error_count,
            total_lines=result.total_lines,
        )
        return result

    def _check_header(self, raw: str, location: str, result: LoadResult) -> None:
        # Spreadsheet exports often start with a UTF-8 byte order mark.
        fields = [field.strip().lower() for field in raw.lstrip("\ufeff").split(",")]
        if fields != [name.lower() for name in HEADER]:
            message = (
                f"Unexpected header {raw!r}; expected {','.join(HEADER)!r}. "
                "The first line was skipped."
            )
            result.warnings.append(message)
            logger.warning("header_mismatch", location=location, header=raw)

    def _printable(self, raw: str) -> str:
        # Undecodable bytes are shown as U+FFFD in diagnostics and logs.
        return raw.encode(self._encoding, "surrogateescape").decode(
            self._encoding, "replace"
        )

    def decode_row(self, raw: str) -> Entry:
        """
        Parse one data row into an Entry.

        Raises:
            RowParseError: If the row does not follow the field grammar
        """
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as e:
            raise RowParseError(
                f"Row is not valid {self._encoding} text at position {e.start}"
            ) from e

        try:
            fields = next(csv.reader([raw], strict=True))
        except csv.Error as e:
            raise RowParseError(f"Malformed quoting: {e}") from e
        except StopIteration:
            raise RowParseError("Empty row")

        if len(fields) != len(HEADER):
            raise RowParseError(
                f"Expected {len(HEADER)} fields, found {len(fields)}"
            )

        amount_text, timestamp_text, category, kind_text = fields
        amount = parse_amount(amount_text)
        timestamp = parse_timestamp(timestamp_text)
        kind = parse_kind(kind_text)

        try:
            return Entry(
                amount=amount,
                timestamp=timestamp,
                category=category,
                kind=kind,
            )
        except ValidationError as e:
            raise RowParseError(_describe_validation_error(e)) from e

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_row(self, entry: Entry) -> list[str]:
        """
        Canonical field values for one entry.

        Raises:
            ValueError: If the timestamp has no epoch representation
        """
        if self._timestamp_format == "epoch":
            try:
                timestamp = str(int(entry.timestamp.timestamp()))
            except (OverflowError, OSError, ValueError) as e:
                raise ValueError(
                    f"{entry.timestamp.isoformat()} cannot be written as an epoch: {e}"
                ) from e
        else:
            timestamp = entry.timestamp.isoformat(timespec="seconds")
        return [
            format(entry.amount, "f"),
            timestamp,
            entry.category,
            entry.kind.value,
        ]

    def encode(self, entries: Iterable[Entry], destination: Union[str, os.PathLike]) -> int:
        """
        Write the header and one row per entry, in order.

        Missing parent directories are created. The destination is only
        replaced once every row has been written.

        Returns:
            Number of rows written

        Raises:
            RecordIOError: If any part of the write fails
        """
        path = Path(destination)
        rows = 0

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.",
                suffix=".tmp",
                dir=path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding=self._encoding, newline="") as handle:
                    writer = csv.writer(handle, lineterminator="\n")
                    writer.writerow(HEADER)
                    for entry in entries:
                        writer.writerow(self.encode_row(entry))
                        rows += 1
                os.replace(tmp_name, path)
            except BaseException:
                with suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except (OSError, ValueError) as e:
            # ValueError: an unencodable category or an epoch out of range.
            raise RecordIOError(str(path), str(e)) from e

        logger.info("ledger_encoded", location=str(path), rows=rows)
        return rows


class CsvFileEntryStorage(EntryStorageInterface):
    """
    File-backed storage: one ledger file at a fixed, already resolved path.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        codec: Optional[CsvEntryCodec] = None,
    ):
        self._path = Path(path)
        self._codec = codec or CsvEntryCodec()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> LoadResult:
        return self._codec.decode(self._path)

    def save(self, entries: Iterable[Entry]) -> int:
        return self._codec.encode(entries, self._path)
