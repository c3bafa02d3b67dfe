"""
Load Outcome Models

Decoding a ledger file never stops at the first bad row. Instead the
codec hands back a LoadResult that separates the entries it could read
from a diagnostic for every row it could not, so the caller decides how
loudly to complain.
"""

from pydantic import BaseModel, Field

from ledgerbook.models.entry import Entry


class RowDiagnostic(BaseModel):
    """A single row that failed to parse."""

    line_number: int = Field(
        ...,
        ge=1,
        description="1-based physical line number in the file (header is line 1)"
    )
    message: str = Field(
        ...,
        description="Why the row was rejected"
    )
    raw_line: str = Field(
        ...,
        description="The row exactly as read, without its line terminator"
    )

    def to_log_dict(self) -> dict:
        return {
            "line_number": self.line_number,
            "message": self.message,
            "raw_line": self.raw_line,
        }


class LoadResult(BaseModel):
    """
    Result of decoding a ledger file.

    total_lines counts the non-blank data lines that were looked at;
    the header and blank lines are not included.
    """

    entries: list[Entry] = Field(
        default_factory=list,
        description="Successfully parsed entries, in file order"
    )
    diagnostics: list[RowDiagnostic] = Field(
        default_factory=list,
        description="One diagnostic per rejected row, in file order"
    )
    total_lines: int = Field(
        default=0,
        ge=0,
        description="Number of data lines processed"
    )

    # Warnings don't reject rows but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal problems with the file as a whole"
    )

    @property
    def errors(self) -> list[RowDiagnostic]:
        return self.diagnostics

    @property
    def success_count(self) -> int:
        return len(self.entries)

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)
