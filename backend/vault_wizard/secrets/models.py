"""Secret record models."""

from pydantic import BaseModel, ConfigDict


class SecretRecord(BaseModel):
    """One CSV data row: a single key/value pair of a named secret."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    value: str
    line: int | None = None  # 1-based line in the source file, header is line 1


class ParseResult(BaseModel):
    """Outcome of parsing a CSV file."""
    records: list[SecretRecord]
    errors: list[str]

    @property
    def ok(self) -> bool:
        """True when no row was rejected."""
        return not self.errors


SecretBundle = dict[str, dict[str, str]]
