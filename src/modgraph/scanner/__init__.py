"""Module specifier scanning."""

from .lexical import Token, tokenize
from .specifiers import SpecifierRecord, is_relative_specifier, scan_specifiers

__all__ = [
    "SpecifierRecord",
    "Token",
    "is_relative_specifier",
    "scan_specifiers",
    "tokenize",
]
