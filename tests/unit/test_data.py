import itertools

import pytest

from backpropnets.core.types import Example
from backpropnets.data import available_datasets, get_dataset, register_dataset
from backpropnets.data.registry import DatasetSpec


def test_xor_truth_table():
    spec = get_dataset("xor")
    assert (spec.d_in, spec.d_out) == (2, 1)
    table = {tuple(ex.inputs): ex.targets[0] for ex in spec.examples}
    assert table == {(0.0, 0.0): 0.0, (0.0, 1.0): 1.0, (1.0, 0.0): 1.0, (1.0, 1.0): 0.0}


def test_xor_stream_is_seeded_and_consistent():
    spec = get_dataset("xor")
    first = list(itertools.islice(spec.stream(4), 20))
    second = list(itertools.islice(spec.stream(4), 20))
    assert first == second
    for example in first:
        assert example.targets[0] == float(int(example.inputs[0]) ^ int(example.inputs[1]))


def test_parity_generalises_xor():
    spec = get_dataset("xor", bits=3)
    assert len(spec.examples) == 8
    assert spec.provenance == {"type": "xor", "bits": 3}
    for example in spec.examples:
        assert example.targets[0] == sum(example.inputs) % 2


def test_xor_rejects_single_bit():
    with pytest.raises(ValueError):
        get_dataset("xor", bits=1)


def test_unknown_dataset():
    with pytest.raises(KeyError):
        get_dataset("does-not-exist")


def test_register_dataset_decorator():
    @register_dataset("unit-identity")
    def _identity(**_):
        examples = [Example(inputs=(1.0,), targets=(1.0,))]
        return DatasetSpec(
            name="unit-identity",
            d_in=1,
            d_out=1,
            stream=lambda seed: iter(examples),
            examples=examples,
            provenance={},
        )

    assert "unit-identity" in available_datasets()
    assert get_dataset("unit-identity").examples[0].targets == (1.0,)
