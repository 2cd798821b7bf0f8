#!/usr/bin/env python3
"""
String Cache Module
Deduplicated string table stored near the start of every CCBI file.

Each entry is a 16-bit big-endian length followed by that many raw bytes.
The bytes are percent-encoded one by one and the resulting text is
percent-decoded as UTF-8. Everything after the table refers to strings by
their index only.
"""

from typing import List
from urllib.parse import unquote

from core.errors import BoundsError, FormatError

from .bit_cursor import BitCursor


class StringCache:
    """Index-addressed table of decoded strings"""

    def __init__(self):
        self._strings: List[str] = []

    def __len__(self):
        return len(self._strings)

    def __iter__(self):
        return iter(self._strings)

    def __getitem__(self, index: int) -> str:
        if not 0 <= index < len(self._strings):
            raise BoundsError(
                f"string cache index {index} out of range (cache holds {len(self._strings)} strings)"
            )
        return self._strings[index]

    def read(self, cursor: BitCursor):
        """Read the entry count and every entry, in file order"""
        count = cursor.read_uint()
        for _ in range(count):
            self._strings.append(self.read_entry(cursor))

    @staticmethod
    def read_entry(cursor: BitCursor) -> str:
        high = cursor.read_byte()
        low = cursor.read_byte()
        raw = cursor.read_bytes(high << 8 | low)

        encoded = ''.join(f"%{b:02X}" for b in raw)
        try:
            return unquote(encoded, encoding='utf-8', errors='strict')
        except UnicodeDecodeError as e:
            raise FormatError(f"string cache entry is not valid UTF-8: {e}") from e

    def read_cached_string(self, cursor: BitCursor) -> str:
        return self[cursor.read_uint()]
