#!/usr/bin/env python3
"""Basic usage example for snapcodec.

This example demonstrates:
1. Writing scalars, strings and containers
2. Reading them back in the same order
3. Defining a model with Pydantic
4. Calculating encoded sizes
"""

from __future__ import annotations

from typing import Annotated, Optional

from snapcodec import (
    Decoder,
    Encoder,
    FixedInt,
    Scalar,
    SerializableModel,
    encoded_size,
    field_sizes,
    i32,
    u16,
    u64,
)


class CpuState(SerializableModel):
    """Processor state.

    Integer fields carry an explicit wire width.
    """

    rip: Annotated[int, Scalar(u64)] = 0
    rsp: Annotated[int, Scalar(u64)] = 0
    mode: int = FixedInt(bits=8, default=0, description="Execution mode")
    halted: bool = False
    label: Optional[str] = None


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("snapcodec Basic Usage Example")
    print("=" * 60)
    print()

    # Write a few values
    print("1. Writing values...")
    encoder = Encoder()
    encoder.write(True)
    encoder.write(42, i32)
    encoder.write_optional(7, i32)
    encoder.write("abc")
    encoder.write_vector([1, 2, 3], u16)
    print(f"   Buffer size: {len(encoder)} bytes")
    print(f"   First bytes: {encoder.to_bytes()[:8].hex()}")
    print()

    # Read them back
    print("2. Reading values back...")
    decoder = Decoder(encoder)
    print(f"   bool:     {decoder.read(bool)}")
    print(f"   i32:      {decoder.read(i32)}")
    print(f"   optional: {decoder.read_optional(i32)}")
    print(f"   string:   {decoder.read(str)!r}")
    print(f"   vector:   {decoder.read_vector(u16)}")
    print(f"   Remaining: {decoder.get_remaining_size()} bytes")
    print()

    # Models
    print("3. Encoding a model...")
    state = CpuState(rip=0xFFFFFFF0, rsp=0x7000, mode=2, label="boot")
    model_encoder = Encoder()
    model_encoder.write(state)
    decoded = Decoder(model_encoder).read(CpuState)
    print(f"   Original: {state}")
    print(f"   Decoded:  {decoded}")
    print(f"   Equal: {decoded == state}")
    print()

    # Sizes
    print("4. Analyzing sizes...")
    for name, size in field_sizes(CpuState).items():
        print(f"   {name:8s}: {'variable' if size is None else f'{size} bytes'}")
    print(f"   Total for this instance: {encoded_size(state)} bytes")
    print()

    # Diff
    print("5. Comparing buffers...")
    a = Encoder()
    b = Encoder()
    a.write("abc")
    b.write("abd")
    print(f"   First difference at offset {a.get_diff(b)}")


if __name__ == "__main__":
    main()
