"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, MutableMapping

from ..core.types import Example


@dataclass(frozen=True)
class DatasetSpec:
    """Description of a dataset registered in the system.

    Attributes
    ----------
    name:
        Registry identifier.
    d_in, d_out:
        Input and target vector lengths, matching the first and last layer
        sizes of a network trained on it (bias excluded).
    stream:
        ``stream(seed)`` returns an endless iterator of training examples
        drawn in random order.
    examples:
        The finite set of distinct examples, used for evaluation.
    provenance:
        Options the dataset was built with, recorded in run manifests.
    """

    name: str
    d_in: int
    d_out: int
    stream: Callable[[int], Iterator[Example]]
    examples: List[Example]
    provenance: Dict[str, Any]


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, directly or as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        raise KeyError(f"Unknown dataset: {dataset}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.d_in < 1 or spec.d_out < 1:
        raise ValueError(f"Dataset {spec.name!r} must have positive d_in/d_out")
    for example in spec.examples:
        if len(example.inputs) != spec.d_in or len(example.targets) != spec.d_out:
            raise ValueError(f"Dataset {spec.name!r} has an example of the wrong shape")


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
