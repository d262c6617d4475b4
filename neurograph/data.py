"""
Dataset loading and per-feature z-score normalization
"""

import logging
import os
from dataclasses import dataclass
from typing import IO, Iterator, List, Sequence, Union

import numpy as np

from .exceptions import MalformedDatasetError

logger = logging.getLogger(__name__)


@dataclass
class DataInstance:
    """One example: a feature vector ``x`` and an integer label ``y``."""

    x: np.ndarray
    y: int = 0

    def __post_init__(self):
        self.x = np.asarray(self.x, dtype=np.float64)
        self.y = int(self.y)


def normalize(instances: Sequence[DataInstance]) -> List[DataInstance]:
    """
    Z-score every feature in place over the whole set.

    The standard deviation is the population one. A constant feature is only
    centred. An empty set is returned unchanged.

    Args:
        instances: Instances that all have the same number of features

    Returns:
        instances: The same instances, as a list
    """
    instances = list(instances)
    if not instances:
        logger.debug("Skipping normalization of an empty dataset")
        return instances

    features = np.stack([instance.x for instance in instances])
    mean = features.mean(axis=0)
    std = features.std(axis=0)
    std[std == 0] = 1.0
    normalized = (features - mean) / std

    for instance, row in zip(instances, normalized):
        instance.x = row
    return instances


class DataLoader:
    """
    Load a CSV dataset: comma separated features followed by an integer label.

    Features are normalized to zero mean and unit standard deviation as soon
    as the data is loaded.

    Example:
        >>> dl = DataLoader('data/diabetes_train.csv')
        >>> len(dl), dl[0].y
    """

    def __init__(self, source: Union[str, os.PathLike, IO[str], None] = None, normalized: bool = True):
        """
        Args:
            source: Path to a CSV file or an open text stream. ``None`` gives an empty loader.
            normalized: Apply :func:`normalize` after loading
        """
        self.data: List[DataInstance] = []
        if source is None:
            return
        if isinstance(source, (str, os.PathLike)):
            try:
                with open(source) as fin:
                    self.data = self._read(fin, os.fspath(source))
            except OSError as e:
                raise MalformedDatasetError(f"DataLoader failed to open file: {os.fspath(source)}") from e
        else:
            self.data = self._read(source, getattr(source, 'name', '<stream>'))

        if normalized:
            normalize(self.data)
        logger.debug("Loaded %d instances", len(self.data))

    @staticmethod
    def _read(stream: IO[str], name: str) -> List[DataInstance]:
        data = []
        width = None
        for line_number, line in enumerate(stream, start=1):
            line = line.strip()
            if not line:
                continue
            tokens = line.split(',')
            try:
                features = [float(token) for token in tokens[:-1]]
                label = float(tokens[-1])
            except ValueError as e:
                raise MalformedDatasetError(f"{name}, line {line_number}: {e}") from e
            if not label.is_integer():
                raise MalformedDatasetError(
                    f"{name}, line {line_number}: label {tokens[-1].strip()!r} is not an integer"
                )
            label = int(label)
            if width is None:
                width = len(features)
            elif len(features) != width:
                raise MalformedDatasetError(
                    f"{name}, line {line_number}: expected {width} features, got {len(features)}"
                )
            data.append(DataInstance(features, label))
        return data

    def get_data(self) -> List[DataInstance]:
        return list(self.data)

    def __len__(self):
        return len(self.data)

    def __iter__(self) -> Iterator[DataInstance]:
        return iter(self.data)

    def __getitem__(self, index) -> DataInstance:
        return self.data[index]
