#!/usr/bin/env python3
"""
Check the header of CocosBuilder .ccbi files (magic bytes, version, document flag)
"""

import sys

from core.constants import CCB_MAGIC, CCB_VERSION
from core.errors import CCBIError
from readers.bit_cursor import BitCursor


def check_ccbi_format(filename):
    """Describe the header of a .ccbi file"""
    try:
        with open(filename, 'rb') as f:
            # Magic (4) + version (var-int, 1-2 bytes for sane values) + flag (1)
            header = f.read(16)
    except OSError as e:
        return f"Error: {e}"

    cursor = BitCursor(header)
    try:
        magic = cursor.read_bytes(4)
        # Stored as "ibcc", compared back-to-front
        if magic[::-1] != CCB_MAGIC.encode('ascii'):
            return f"Not a ccbi file (header: {header[:8].hex()})"

        version = cursor.read_uint()
        if version != CCB_VERSION:
            return f"ccbi version {version} (unsupported, reader expects {CCB_VERSION})"

        document_controlled = cursor.read_bool()
    except CCBIError as e:
        return f"Truncated header: {e}"

    mode = "document-controlled" if document_controlled else "owner-controlled"
    return f"ccbi version {version}, {mode}"


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python check_ccbi_format.py <file1.ccbi> [file2.ccbi] ...")
        sys.exit(1)

    for filename in sys.argv[1:]:
        format_type = check_ccbi_format(filename)
        print(f"{filename}: {format_type}")
