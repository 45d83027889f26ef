"""Output accumulator: committed shapes in paint order plus the background."""

from __future__ import annotations

from collections.abc import Iterator

from primsight.engine.shapes import Shape
from primsight.models.shapes import ShapeRecord
from primsight.utils.color import RGB


class OutputAccumulator:
    """Append-only record of a run's committed shapes."""

    def __init__(self, background: RGB) -> None:
        self.background = background
        self._records: list[ShapeRecord] = []

    def append(self, shape: Shape, color: RGB, alpha: float) -> ShapeRecord:
        record = ShapeRecord.from_shape(shape, color, alpha)
        self._records.append(record)
        return record

    @property
    def records(self) -> tuple[ShapeRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ShapeRecord]:
        return iter(self.records)
