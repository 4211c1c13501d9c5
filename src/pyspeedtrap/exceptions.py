"""Custom exception hierarchy for pyspeedtrap."""

from __future__ import annotations


class SpeedTrapError(Exception):
    """Base exception for all pyspeedtrap errors."""


class SpeedTrapConfigError(SpeedTrapError):
    """Invalid or missing configuration."""


class DataLoadError(SpeedTrapError):
    """A trap dataset is missing, unreadable, or not in the expected schema.

    Raised by the per-dataset loaders and recovered inside
    :class:`pyspeedtrap.store.TrapStore`: the dataset contributes zero
    records and loading continues with the remaining datasets.
    """

    def __init__(self, message: str, *, dataset: str = "") -> None:
        self.dataset = dataset
        super().__init__(message)


class MalformedRecordError(SpeedTrapError):
    """A single trap record lacks geometry or carries an unparseable limit.

    Recovered inside the dataset parsers: the record is skipped.
    """

    def __init__(self, message: str, *, dataset: str = "", index: int | None = None) -> None:
        self.dataset = dataset
        self.index = index
        super().__init__(message)
