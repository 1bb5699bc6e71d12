import pytest

from boardcam.sccb import SCCB, swap_bytes
from boardcam.twi import AddressNackError


class FakeDevice:
    def __init__(self, registers=None, wide=False):
        self.registers = dict(registers or {})
        self.width = 2 if wide else 1
        self.pointer = 0


class FakeBus:
    """Byte-level bus that records every transfer."""

    def __init__(self, devices):
        self.devices = devices
        self.log = []

    def write_to(self, address, data, send_stop=True):
        data = bytes(data)
        self.log.append(("write", address, data))
        device = self.devices.get(address)
        if device is None:
            raise AddressNackError(f"nothing at 0x{address:02x}")
        device.pointer = int.from_bytes(data[: device.width], "big")
        if len(data) > device.width:
            device.registers[device.pointer] = data[device.width]

    def read_from(self, address, length, send_stop=True):
        self.log.append(("read", address, length))
        device = self.devices.get(address)
        if device is None:
            raise AddressNackError(f"nothing at 0x{address:02x}")
        return bytes([device.registers.get(device.pointer, 0)] * length)


def make_sccb(devices):
    sccb = SCCB(FakeBus(devices))
    sccb.probe_delay = 0
    return sccb


def test_swap_bytes_exchanges_halves():
    assert swap_bytes(0x300A) == 0x0A30


@pytest.mark.parametrize("value", [0, 1, 0xFF, 0x100, 0x300A, 0xFFFF])
def test_swap_bytes_twice_is_identity(value):
    assert swap_bytes(swap_bytes(value)) == value


def test_swap_bytes_rejects_wide_values():
    with pytest.raises(ValueError):
        swap_bytes(0x10000)


def test_probe_returns_first_answering_address():
    sccb = make_sccb({0x30: FakeDevice(), 0x3C: FakeDevice()})
    assert sccb.probe() == 0x30
    attempts = [entry for entry in sccb.bus.log if entry[0] == "write"]
    assert [entry[1] for entry in attempts] == list(range(0x31))
    assert all(entry[2] == bytes([0x00]) for entry in attempts)


def test_probe_without_devices_tries_every_address():
    sccb = make_sccb({})
    assert sccb.probe() is None
    assert len(sccb.bus.log) == 127


def test_read_sends_register_then_reads_one_byte():
    sccb = make_sccb({0x30: FakeDevice({0x0A: 0x26})})
    assert sccb.read(0x30, 0x0A) == 0x26
    assert sccb.bus.log == [("write", 0x30, bytes([0x0A])), ("read", 0x30, 1)]


def test_write_then_read_round_trip():
    sccb = make_sccb({0x30: FakeDevice()})
    sccb.write(0x30, 0x12, 0x80)
    assert sccb.bus.log[0] == ("write", 0x30, bytes([0x12, 0x80]))
    assert sccb.read(0x30, 0x12) == 0x80


def test_read16_sends_register_high_byte_first():
    sccb = make_sccb({0x3C: FakeDevice({0x300A: 0x56}, wide=True)})
    assert sccb.read16(0x3C, 0x300A) == 0x56
    assert sccb.bus.log[0] == ("write", 0x3C, bytes([0x30, 0x0A]))


def test_write16_then_read16_round_trip():
    device = FakeDevice(wide=True)
    sccb = make_sccb({0x3C: device})
    sccb.write16(0x3C, 0x3008, 0x42)
    assert device.registers == {0x3008: 0x42}
    assert sccb.read16(0x3C, 0x3008) == 0x42


def test_read_from_missing_device_raises():
    sccb = make_sccb({})
    with pytest.raises(AddressNackError):
        sccb.read(0x30, 0x0A)


def test_write_to_missing_device_raises():
    sccb = make_sccb({})
    with pytest.raises(AddressNackError):
        sccb.write(0x30, 0x12, 0x80)


def test_repeated_write16_failures_keep_raising():
    sccb = make_sccb({})
    for _ in range(2):
        with pytest.raises(AddressNackError):
            sccb.write16(0x3C, 0x3008, 0x01)
    assert len(sccb.bus.log) == 2


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.read(0x30, 0x100),
        lambda s: s.write(0x30, 0x12, 0x100),
        lambda s: s.read16(0x3C, 0x10000),
        lambda s: s.write16(0x3C, 0x3008, -1),
    ],
)
def test_out_of_range_values_are_rejected(call):
    sccb = make_sccb({0x30: FakeDevice(), 0x3C: FakeDevice(wide=True)})
    with pytest.raises(ValueError):
        call(sccb)
    assert sccb.bus.log == []