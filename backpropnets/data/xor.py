"""Random-order XOR (n-bit parity) examples."""

from __future__ import annotations

import itertools
from typing import Iterator

import numpy as np

from ..core.types import Example
from .registry import DatasetSpec, register_dataset


def _parity(bits) -> float:
    return float(sum(int(b) for b in bits) % 2)


@register_dataset("xor")
def make_xor(bits: int = 2, **_: object) -> DatasetSpec:
    bits = int(bits)
    if bits < 2:
        raise ValueError(f"xor needs at least 2 input bits, got {bits}")

    table = [
        Example(inputs=tuple(float(b) for b in row), targets=(_parity(row),))
        for row in itertools.product((0, 1), repeat=bits)
    ]

    def stream(seed: int) -> Iterator[Example]:
        rng = np.random.default_rng(seed)
        while True:
            row = rng.integers(0, 2, size=bits)
            yield Example(inputs=tuple(float(b) for b in row), targets=(_parity(row),))

    return DatasetSpec(
        name="xor",
        d_in=bits,
        d_out=1,
        stream=stream,
        examples=table,
        provenance={"type": "xor", "bits": bits},
    )
