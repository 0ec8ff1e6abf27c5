"""
Snapshot buffering and tab-separated export.

The simulation captures a snapshot of the string once per whole second of
simulation time into a bounded FIFO. Exporting drains the buffer, oldest
snapshot first, into a time series with one line per (time, point):

    t<TAB>x<TAB>y
    0.0<TAB>0.0<TAB>0.0
    0.0<TAB>1.0<TAB>0.002
    ...
"""

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional, TextIO
import logging

import numpy as np

from .errors import ConfigurationError, ExportError
from .strings import StringState

logger = logging.getLogger(__name__)

HEADER = "t\tx\ty\n"
DEFAULT_CAPACITY = 10


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read-only copy of the string's positions at one instant."""
    time: float
    positions: np.ndarray

    @classmethod
    def of(cls, state: StringState, time: float) -> 'Snapshot':
        positions = state.positions.copy()
        positions.setflags(write=False)
        return cls(time=float(time), positions=positions)


def format_snapshot(snapshot: Snapshot, point_spacing: float) -> Iterator[str]:
    """Yield one export line per point of `snapshot`."""
    for index, amplitude in enumerate(snapshot.positions):
        yield f"{snapshot.time:.1f}\t{index * point_spacing}\t{float(amplitude)}\n"


class SampleBuffer:
    """
    Bounded FIFO of snapshots.

    Never holds more than `capacity` snapshots: capturing into a full
    buffer silently evicts the oldest one.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ConfigurationError(f"Buffer capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.evicted = 0
        self._snapshots: deque[Snapshot] = deque()

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    def size(self) -> int:
        return len(self._snapshots)

    def is_empty(self) -> bool:
        return not self._snapshots

    def oldest(self) -> Optional[Snapshot]:
        return self._snapshots[0] if self._snapshots else None

    def capture(self, state: StringState, time: float) -> Snapshot:
        """Store a copy of the current positions tagged with `time`."""
        snapshot = Snapshot.of(state, time)
        self._snapshots.append(snapshot)
        if len(self._snapshots) > self.capacity:
            dropped = self._snapshots.popleft()
            self.evicted += 1
            logger.debug("Buffer full, evicted snapshot at t=%.1f", dropped.time)
        return snapshot

    def drain(self, destination: TextIO, point_spacing: float) -> int:
        """
        Write every buffered snapshot to `destination`, oldest first.

        Each snapshot is removed once all of its lines are written, so a
        failed write leaves the snapshot being written (and all newer ones)
        in the buffer.

        Returns:
            Number of snapshots written
        """
        count = 0
        while self._snapshots:
            snapshot = self._snapshots[0]
            try:
                for line in format_snapshot(snapshot, point_spacing):
                    destination.write(line)
            except OSError as exc:
                raise ExportError(f"Failed writing snapshot at t={snapshot.time:.1f}: {exc}") from exc
            self._snapshots.popleft()
            count += 1
        return count

    def clear(self) -> None:
        self._snapshots.clear()


def capture(buffer: SampleBuffer, state: StringState, time: float) -> Snapshot:
    return buffer.capture(state, time)


def drain(buffer: SampleBuffer, destination: TextIO, point_spacing: float) -> int:
    return buffer.drain(destination, point_spacing)


class Exporter:
    """
    Tab-separated output file for drained snapshots.

    The file is opened and the header written at construction, so an
    unwritable destination fails before any simulation work is done.
    """

    def __init__(self, path, point_spacing: float):
        self.path = str(path)
        self.point_spacing = point_spacing
        self.snapshots_written = 0
        try:
            self._file = open(self.path, 'w', encoding='utf-8')
        except OSError as exc:
            raise ExportError(f"Could not open output file '{self.path}': {exc}") from exc
        try:
            self._file.write(HEADER)
        except OSError as exc:
            self._file.close()
            raise ExportError(f"Could not write header to '{self.path}': {exc}") from exc
        logger.info("Writing samples to %s", self.path)

    @property
    def closed(self) -> bool:
        return self._file.closed

    def drain(self, buffer: SampleBuffer) -> int:
        """Drain `buffer` into the file. Returns snapshots written."""
        if self.closed:
            raise ExportError(f"Output file '{self.path}' is already closed")
        count = buffer.drain(self._file, self.point_spacing)
        self.snapshots_written += count
        if count:
            logger.info("Saved %d snapshot(s) to %s", count, self.path)
        return count

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> 'Exporter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
