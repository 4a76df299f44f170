"""CSV parsing for secret upload files."""

import csv
import re

import structlog

from .models import ParseResult, SecretRecord

logger = structlog.get_logger("secrets.parser")

EXPECTED_HEADER = ("SECRET_NAME", "SECRET_KEY", "SECRET_VALUE")

_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")
_LINE_BREAKS = re.compile(r"[\r\n]")


class CsvSecretParser:
    """Turns CSV text into secret records.

    The first line is always treated as the header and discarded. Every
    other non-blank line must carry exactly three fields: name, key and
    value. Rows that fail are reported by 1-based line number and skipped;
    the parser itself never raises.
    """

    def parse(self, text: str) -> ParseResult:
        """Parse CSV text into records and row-level errors."""
        records: list[SecretRecord] = []
        errors: list[str] = []

        lines = text.strip().split("\n")

        for index, raw_line in enumerate(lines[1:], start=1):
            line = raw_line.strip()
            if not line:
                continue

            line_number = index + 1
            try:
                fields = next(csv.reader([line], skipinitialspace=True))
            except csv.Error as e:
                errors.append(f"Line {line_number}: Malformed row ({e})")
                continue

            if len(fields) > len(EXPECTED_HEADER):
                errors.append(
                    f"Line {line_number}: Expected {len(EXPECTED_HEADER)} fields, found {len(fields)}"
                )
                continue

            name, key, value = (self._clean(field) for field in self._pad(fields))

            if not name or not key or not value:
                errors.append(f"Line {line_number}: Missing required fields")
                continue

            records.append(SecretRecord(name=name, key=key, value=value, line=line_number))

        logger.info("CSV parsed", records=len(records), errors=len(errors))
        return ParseResult(records=records, errors=errors)

    def parse_bytes(self, data: bytes) -> ParseResult:
        """Decode an uploaded file as UTF-8 and parse it."""
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("CSV upload is not valid UTF-8", size=len(data))
            return ParseResult(records=[], errors=["File is not valid UTF-8 text"])
        return self.parse(text)

    @staticmethod
    def _pad(fields: list[str]) -> list[str]:
        return fields + [""] * (len(EXPECTED_HEADER) - len(fields))

    @staticmethod
    def _clean(field: str) -> str:
        field = _SURROUNDING_QUOTES.sub("", field.strip())
        return _LINE_BREAKS.sub("", field)


csv_parser = CsvSecretParser()
