"""Register access to camera sensors over the two-wire control bus."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from boardcam.twi import I2CError

_log = logging.getLogger(__name__)

_PROBE_ADDRESSES = range(127)


class _Bus(Protocol):
    def write_to(self, address: int, data: bytes, send_stop: bool = True) -> None: ...

    def read_from(self, address: int, length: int, send_stop: bool = True) -> bytes: ...


def swap_bytes(reg: int) -> int:
    """Exchange the high and low byte of a 16-bit value."""
    if not 0 <= reg <= 0xFFFF:
        raise ValueError(f"0x{reg:x} is not a 16-bit value")
    return ((reg << 8) | (reg >> 8)) & 0xFFFF


def _check(name: str, value: int, limit: int) -> None:
    if not 0 <= value <= limit:
        raise ValueError(f"{name} 0x{value:x} out of range")


class SCCB:
    """Reads and writes sensor registers through a two-wire bus master."""

    probe_delay = 0.01

    def __init__(self, bus: _Bus) -> None:
        self.bus = bus
        self._failed_wide_writes = 0

    def probe(self) -> int | None:
        """Return the first address that acknowledges, or None if none does."""
        last = _PROBE_ADDRESSES[-1]
        for address in _PROBE_ADDRESSES:
            try:
                self.bus.write_to(address, bytes([0x00]), True)
            except I2CError:
                if address != last:
                    time.sleep(self.probe_delay)
                continue
            return address
        return None

    def read(self, slave: int, reg: int) -> int:
        """Return the value of 8-bit register ``reg``."""
        _check("register", reg, 0xFF)
        return self._read(slave, bytes([reg]), f"{reg:02x}")

    def write(self, slave: int, reg: int, data: int) -> None:
        """Set 8-bit register ``reg`` to ``data``."""
        _check("register", reg, 0xFF)
        _check("value", data, 0xFF)
        try:
            self.bus.write_to(slave, bytes([reg, data]), True)
        except I2CError as exc:
            _log.error("SCCB write [%02x]=%02x failed: %s", reg, data, exc)
            raise

    def read16(self, slave: int, reg: int) -> int:
        """Return the value of 16-bit addressed register ``reg``."""
        _check("register", reg, 0xFFFF)
        return self._read(slave, swap_bytes(reg).to_bytes(2, "little"), f"{reg:04x}")

    def write16(self, slave: int, reg: int, data: int) -> None:
        """Set 16-bit addressed register ``reg`` to ``data``."""
        _check("register", reg, 0xFFFF)
        _check("value", data, 0xFF)
        try:
            self.bus.write_to(slave, swap_bytes(reg).to_bytes(2, "little") + bytes([data]), True)
        except I2CError as exc:
            _log.error("W [%04x]=%02x %d fail: %s", reg, data, self._failed_wide_writes, exc)
            self._failed_wide_writes += 1
            raise

    def _read(self, slave: int, pointer: bytes, label: str) -> int:
        try:
            self.bus.write_to(slave, pointer, True)
            data = self.bus.read_from(slave, 1, True)
        except I2CError as exc:
            _log.error("SCCB read [%s] failed: %s", label, exc)
            raise
        return data[0]