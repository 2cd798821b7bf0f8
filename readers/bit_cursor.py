#!/usr/bin/env python3
"""
Bit Cursor Module
Bit- and byte-level access to a CCBI byte buffer.

The buffer is unpacked once into a little-endian bit array (bit 0 of each
byte first), which is the order the format's variable-length integers are
written in. Byte-level reads always start on a byte boundary.

Primitive encodings:
  - Variable-length integers: unary bit-length prefix terminated by a 1 bit,
    then that many payload bits most-significant first. Unsigned values are
    stored plus one; signed values interleave positives (odd) and negatives
    (even). Every integer ends byte-aligned.
  - Floats: one tag byte selecting a sentinel (0, 1, -1, 0.5), a signed
    integer, or a full 4-byte IEEE-754 single whose fields are extracted
    from the tail of the footprint backwards.
"""

import numpy as np

from core.constants import FloatType
from core.errors import BoundsError

# Bits inspected before falling back to a scan of the whole remaining buffer
_PREFIX_WINDOW = 64


class BitCursor:
    """Read position (byte offset + bit offset) into an immutable buffer

    Args:
        data: Raw file contents
    """

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self._bits = np.unpackbits(np.frombuffer(self.data, dtype=np.uint8), bitorder='little')
        self.byte_offset = 0
        self.bit_offset = 0

    def __len__(self):
        return len(self.data)

    @property
    def bit_position(self) -> int:
        return self.byte_offset * 8 + self.bit_offset

    @property
    def remaining_bits(self) -> int:
        return len(self._bits) - self.bit_position

    @property
    def at_end(self) -> bool:
        return self.remaining_bits <= 0

    # ------------------------------------------------------------------
    # Bit level
    # ------------------------------------------------------------------

    def read_bit(self) -> int:
        pos = self.bit_position
        if pos >= len(self._bits):
            raise BoundsError(f"bit read past end of buffer at byte {self.byte_offset}")
        bit = int(self._bits[pos])
        self.bit_offset += 1
        if self.bit_offset >= 8:
            self.bit_offset = 0
            self.byte_offset += 1
        return bit

    def align(self):
        """Move to the next byte boundary unless already on one"""
        if self.bit_offset:
            self.bit_offset = 0
            self.byte_offset += 1

    def read_int(self, signed: bool) -> int:
        """Decode a variable-length integer and align to the next byte

        Raises:
            BoundsError: If the unary prefix or the payload runs past the
                         end of the buffer
        """
        pos = self.bit_position
        num_bits = self._unary_prefix_length(pos)

        payload_start = pos + num_bits + 1
        payload_end = payload_start + num_bits
        if payload_end > len(self._bits):
            raise BoundsError(
                f"integer with {num_bits}-bit payload at byte {self.byte_offset} "
                f"exceeds buffer ({self.remaining_bits} bits left)"
            )

        # packbits is MSB-first and zero-pads the last byte on the right
        packed = np.packbits(self._bits[payload_start:payload_end])
        current = int.from_bytes(packed.tobytes(), 'big') >> (-num_bits % 8)
        current |= 1 << num_bits

        self.byte_offset, self.bit_offset = divmod(payload_end, 8)
        self.align()

        if signed:
            if current % 2:
                return current // 2
            return -(current // 2)
        return current - 1

    def read_uint(self) -> int:
        return self.read_int(False)

    def read_sint(self) -> int:
        return self.read_int(True)

    def _unary_prefix_length(self, pos: int) -> int:
        window = self._bits[pos:pos + _PREFIX_WINDOW]
        hits = np.flatnonzero(window)
        if hits.size == 0:
            hits = np.flatnonzero(self._bits[pos:])
            if hits.size == 0:
                raise BoundsError(f"unterminated integer prefix at byte {self.byte_offset}")
        return int(hits[0])

    # ------------------------------------------------------------------
    # Byte level
    # ------------------------------------------------------------------

    def read_byte(self) -> int:
        self.align()
        if self.byte_offset >= len(self.data):
            raise BoundsError(f"byte read past end of buffer at byte {self.byte_offset}")
        value = self.data[self.byte_offset]
        self.byte_offset += 1
        return value

    def read_bool(self) -> bool:
        return self.read_byte() != 0

    def read_bytes(self, count: int) -> bytes:
        self.align()
        end = self.byte_offset + count
        if count < 0 or end > len(self.data):
            raise BoundsError(
                f"read of {count} bytes at byte {self.byte_offset} exceeds buffer of {len(self.data)}"
            )
        chunk = self.data[self.byte_offset:end]
        self.byte_offset = end
        return chunk

    # ------------------------------------------------------------------
    # Floats
    # ------------------------------------------------------------------

    def read_float(self) -> float:
        tag = self.read_byte()

        if tag == FloatType.ZERO:
            return 0.0
        elif tag == FloatType.ONE:
            return 1.0
        elif tag == FloatType.MINUS_ONE:
            return -1.0
        elif tag == FloatType.HALF:
            return 0.5
        elif tag == FloatType.INTEGER:
            return float(self.read_int(True))
        return self.decode_float(23, 8)

    def decode_float(self, precision_bits: int, exponent_bits: int) -> float:
        """Decode a full IEEE-754 value from the bytes at the cursor

        Footprint byte i is taken from the tail of the value, so byte 0 holds
        the sign and the high exponent bits.

        Args:
            precision_bits: Mantissa width (23 for single precision)
            exponent_bits: Exponent width (8 for single precision)

        Returns:
            float: Decoded value, including NaN, infinities and subnormals
        """
        length = precision_bits + exponent_bits + 1
        size = length >> 3
        if self.byte_offset + -(-length // 8) > len(self.data):
            raise BoundsError(
                f"{length}-bit float at byte {self.byte_offset} exceeds buffer of {len(self.data)}"
            )

        bias = (1 << (exponent_bits - 1)) - 1
        sign = self._read_bits_only(precision_bits + exponent_bits, 1, size)
        exponent = self._read_bits_only(precision_bits, exponent_bits, size)

        significand = 0.0
        divisor = 2.0
        cur_byte = 0
        remaining = precision_bits
        while True:
            cur_byte += 1
            byte_value = self._read_byte_only(cur_byte, size)
            start_bit = remaining % 8 or 8
            mask = (1 << start_bit) >> 1
            while mask:
                if byte_value & mask:
                    significand += 1.0 / divisor
                divisor *= 2.0
                mask >>= 1
            remaining -= start_bit
            if not remaining:
                break

        self.byte_offset += size

        if exponent == (bias << 1) + 1:
            if significand:
                return float('nan')
            return float('-inf') if sign else float('inf')

        factor = 1 - 2 * sign
        if not exponent and not significand:
            return factor * 0.0
        if not exponent:
            return factor * 2.0 ** (1 - bias) * significand
        return factor * 2.0 ** (exponent - bias) * (1.0 + significand)

    def _read_bits_only(self, start: int, length: int, size: int) -> int:
        """Extract a bit window of the footprint without moving the cursor"""
        offset_left = (start + length) % 8
        offset_right = start % 8
        cur_byte = size - (start >> 3) - 1
        last_byte = size + (-(start + length) >> 3)
        diff = cur_byte - last_byte

        width = 8 - offset_right if diff else length
        total = (self._read_byte_only(cur_byte, size) >> offset_right) & ((1 << width) - 1)

        if diff and offset_left:
            low = self._read_byte_only(last_byte, size) & ((1 << offset_left) - 1)
            total += low << ((diff << 3) - offset_right)
            last_byte += 1
            diff -= 1

        while diff:
            total += self._read_byte_only(last_byte, size) << ((diff << 3) - offset_right)
            last_byte += 1
            diff -= 1

        return total

    def _read_byte_only(self, index: int, size: int) -> int:
        return self.data[self.byte_offset + size - index - 1]
