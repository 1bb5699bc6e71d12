"""Bit-banged two-wire (I2C) bus master over a pair of open-drain lines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable


class I2CError(Exception):
    """A transfer on the two-wire bus failed."""

    code = 1


class BusBusyError(I2CError):
    """The data line was held low when a start condition was attempted."""

    code = 4


class AddressNackError(I2CError):
    """No device acknowledged the address byte."""

    code = 2


class DataNackError(I2CError):
    """The addressed device refused a data byte."""

    code = 3


class Lines(ABC):
    """The SDA and SCL lines of a bus.

    Setting a line high releases it so the pull-up can raise it; setting
    it low drives it low. Reading returns the level actually on the wire.
    """

    @abstractmethod
    def set_sda(self, high: bool) -> None:
        """Release (True) or drive low (False) the data line."""

    @abstractmethod
    def set_scl(self, high: bool) -> None:
        """Release (True) or drive low (False) the clock line."""

    @abstractmethod
    def sda(self) -> bool:
        """Return the level of the data line."""

    @abstractmethod
    def scl(self) -> bool:
        """Return the level of the clock line."""

    def delay(self, cycles: int) -> None:
        """Wait for ``cycles`` line-read periods; does nothing by default."""


def clock_divider(freq: int, cpu_80mhz: bool = False) -> int:
    """Return the delay count giving roughly ``freq`` Hz on the clock line."""
    if freq < 0:
        raise ValueError(f"bus frequency must not be negative, got {freq}")
    if cpu_80mhz:
        steps = ((100_000, 19), (200_000, 8), (300_000, 3), (400_000, 1))
    else:
        steps = (
            (100_000, 32),
            (200_000, 14),
            (300_000, 8),
            (400_000, 5),
            (500_000, 3),
            (600_000, 2),
        )
    return next((count for limit, count in steps if freq <= limit), 1)


_RECOVERY_CLOCKS = 10


class SoftI2C:
    """Bus master that produces the two-wire protocol by toggling lines."""

    def __init__(self, lines: Lines, cpu_80mhz: bool = False) -> None:
        self.lines = lines
        self.cpu_80mhz = cpu_80mhz
        self.stretch_limit = 800 if cpu_80mhz else 1600
        lines.set_sda(True)
        lines.set_scl(True)
        self.divider = clock_divider(100_000, cpu_80mhz)

    def set_clock(self, freq: int) -> None:
        """Select the bus speed closest to ``freq`` Hz."""
        self.divider = clock_divider(freq, self.cpu_80mhz)

    def stop(self) -> None:
        """Release both lines."""
        self.lines.set_sda(True)
        self.lines.set_scl(True)

    def write_to(self, address: int, data: Iterable[int], send_stop: bool = True) -> None:
        """Send ``data`` to the device at 7-bit ``address``."""
        _check_address(address)
        payload = bytes(data)
        self._begin(address << 1)
        for byte in payload:
            if not self._write_byte(byte):
                if send_stop:
                    self._stop_condition()
                raise DataNackError(f"device 0x{address:02x} refused byte 0x{byte:02x}")
        self._finish(send_stop)

    def read_from(self, address: int, length: int, send_stop: bool = True) -> bytes:
        """Read ``length`` bytes from the device at 7-bit ``address``."""
        _check_address(address)
        if length < 1:
            raise ValueError(f"length must be at least 1, got {length}")
        self._begin((address << 1) | 1)
        data = bytes(self._read_byte(nack=index == length - 1) for index in range(length))
        self._finish(send_stop)
        return data

    def _begin(self, address_byte: int) -> None:
        if not self._start_condition():
            raise BusBusyError("data line held low, bus busy")
        if not self._write_byte(address_byte & 0xFF):
            self._stop_condition_if(True)
            raise AddressNackError(f"no acknowledge from address 0x{address_byte >> 1:02x}")

    def _stop_condition_if(self, send_stop: bool) -> None:
        if send_stop:
            self._stop_condition()

    def _finish(self, send_stop: bool) -> None:
        if send_stop:
            self._stop_condition()
        lines = self.lines
        clocks = 0
        while not lines.sda() and clocks < _RECOVERY_CLOCKS:
            clocks += 1
            lines.set_scl(False)
            lines.delay(self.divider)
            lines.set_scl(True)
            lines.delay(self.divider)

    def _wait_for_clock(self) -> None:
        waited = 0
        while not self.lines.scl() and waited < self.stretch_limit:
            waited += 1

    def _start_condition(self) -> bool:
        lines = self.lines
        lines.set_scl(True)
        lines.set_sda(True)
        if not lines.sda():
            return False
        lines.delay(self.divider)
        lines.set_sda(False)
        lines.delay(self.divider)
        return True

    def _stop_condition(self) -> None:
        lines = self.lines
        lines.set_scl(False)
        lines.set_sda(False)
        lines.delay(self.divider)
        lines.set_scl(True)
        self._wait_for_clock()
        lines.delay(self.divider)
        lines.set_sda(True)
        lines.delay(self.divider)

    def _write_bit(self, bit: bool) -> None:
        lines = self.lines
        lines.set_scl(False)
        lines.set_sda(bit)
        lines.delay(self.divider + 1)
        lines.set_scl(True)
        self._wait_for_clock()
        lines.delay(self.divider)

    def _read_bit(self) -> bool:
        lines = self.lines
        lines.set_scl(False)
        lines.set_sda(True)
        lines.delay(self.divider + 2)
        lines.set_scl(True)
        self._wait_for_clock()
        bit = lines.sda()
        lines.delay(self.divider)
        return bit

    def _write_byte(self, byte: int) -> bool:
        for shift in range(7, -1, -1):
            self._write_bit(bool((byte >> shift) & 1))
        return not self._read_bit()

    def _read_byte(self, nack: bool) -> int:
        byte = 0
        for _ in range(8):
            byte = (byte << 1) | int(self._read_bit())
        self._write_bit(nack)
        return byte


def _check_address(address: int) -> None:
    if not 0 <= address <= 0x7F:
        raise ValueError(f"address 0x{address:x} is not a 7-bit address")