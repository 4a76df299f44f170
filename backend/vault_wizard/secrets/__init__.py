"""CSV secret parsing and grouping."""

from .grouper import group_secrets
from .models import ParseResult, SecretBundle, SecretRecord
from .parser import CsvSecretParser, csv_parser

__all__ = [
    "CsvSecretParser",
    "csv_parser",
    "group_secrets",
    "ParseResult",
    "SecretBundle",
    "SecretRecord"
]
