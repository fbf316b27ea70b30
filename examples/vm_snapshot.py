#!/usr/bin/env python3
"""Machine snapshot example for snapcodec.

This example demonstrates:
1. Raw-copied ctypes register files
2. Member, free-function and self-decoding types
3. Factories for types without a no-argument constructor
4. Detecting truncated and diverging snapshots
"""

from __future__ import annotations

import ctypes

from snapcodec import (
    Atomic,
    BoundsError,
    Decoder,
    DecoderConfig,
    Encoder,
    deserializer,
    serializer,
    u32,
    u64,
)


class Registers(ctypes.Structure):
    """General purpose registers, copied as raw bytes."""

    _fields_ = [
        ("rax", ctypes.c_uint64),
        ("rip", ctypes.c_uint64),
        ("rsp", ctypes.c_uint64),
        ("rflags", ctypes.c_uint32),
    ]


class Cpu:
    """Processor with member encoding."""

    def __init__(self) -> None:
        self.regs = Registers()
        self.instructions = Atomic(0, u64)

    def serialize(self, encoder: Encoder) -> None:
        encoder.write(self.regs)
        encoder.write_atomic(self.instructions)

    def deserialize(self, decoder: Decoder) -> None:
        decoder.read_into(self.regs)
        decoder.read_atomic(self.instructions)


class Disk:
    """Block device. Its sector size is fixed at construction time."""

    def __init__(self, sector_size: int) -> None:
        self.sector_size = sector_size
        self.dirty: list[int] = []


@serializer(Disk)
def write_disk(disk: Disk, encoder: Encoder) -> None:
    encoder.write_vector(disk.dirty, u64)


@deserializer(Disk)
def read_disk(disk: Disk, decoder: Decoder) -> None:
    decoder.read_vector(u64, into=disk.dirty)


class Nic:
    """Network card that reads its MAC address before anything else."""

    def __init__(self, mac: str) -> None:
        self.mac = mac
        self.rx_packets = 0

    @classmethod
    def from_decoder(cls, decoder: Decoder) -> Nic:
        return cls(decoder.read(str))


@serializer(Nic)
def write_nic(nic: Nic, encoder: Encoder) -> None:
    encoder.write(nic.mac)
    encoder.write(nic.rx_packets, u32)


@deserializer(Nic)
def read_nic(nic: Nic, decoder: Decoder) -> None:
    nic.rx_packets = decoder.read(u32)


class Machine:
    """Emulated machine."""

    def __init__(self) -> None:
        self.cpu = Cpu()
        self.disk = Disk(512)
        self.nic: Nic | None = None

    def serialize(self, encoder: Encoder) -> None:
        encoder.write(self.cpu)
        encoder.write(self.disk)
        encoder.write_optional(self.nic)

    def deserialize(self, decoder: Decoder) -> None:
        decoder.read_into(self.cpu)
        self.disk = decoder.read(Disk)
        self.nic = decoder.read_optional(Nic)


def main() -> None:
    """Run the snapshot example."""
    print("=" * 60)
    print("snapcodec Machine Snapshot Example")
    print("=" * 60)
    print()

    machine = Machine()
    machine.cpu.regs.rip = 0xFFFFFFF0
    machine.cpu.regs.rsp = 0x7000
    machine.cpu.instructions.store(1_000_000)
    machine.disk.dirty = [3, 17, 4096]
    machine.nic = Nic("52:54:00:12:34:56")
    machine.nic.rx_packets = 42

    # Snapshot
    print("1. Taking a snapshot...")
    encoder = Encoder()
    encoder.write(machine)
    data = encoder.to_bytes()
    print(f"   Snapshot size: {len(data)} bytes")
    print()

    # Restore
    print("2. Restoring the snapshot...")
    config = DecoderConfig(factories={Disk: lambda: Disk(512)})
    restored = Decoder(data, config).read(Machine)
    print(f"   rip: {restored.cpu.regs.rip:#x}")
    print(f"   instructions: {restored.cpu.instructions.load()}")
    print(f"   dirty sectors: {restored.disk.dirty}")
    assert restored.nic is not None
    print(f"   nic: {restored.nic.mac} ({restored.nic.rx_packets} packets)")
    print()

    # Truncation
    print("3. Restoring a truncated snapshot...")
    try:
        Decoder(data[: len(data) // 2], config).read(Machine)
    except BoundsError as e:
        print(f"   Rejected: {e}")
    print()

    # Divergence
    print("4. Finding where two snapshots diverge...")
    machine.cpu.regs.rsp -= 8
    other = Encoder()
    other.write(machine)
    encoder.print_diff(other)
    print(f"   First difference at offset {encoder.get_diff(other)}")


if __name__ == "__main__":
    main()
