import dataclasses
import itertools
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

import numpy as np

from .osu_format import DEFAULT_VOLUME, TimingPoint, extract_timing, line_ending, read_text, timing_data
from .utils import logger, pretty_point

# Volumes at or below this are usually used to mute slider ends, not to change the volume of the song
DEFAULT_MUTE_THRESHOLD = 5

TimingBlock = Union[str, list[str], tuple[str, ...]]


def _split_block(timing: TimingBlock) -> tuple[list[str], Optional[str]]:
    # returns the lines and the newline to rejoin them with (None when given as lines)
    if isinstance(timing, str):
        lines = timing.splitlines(keepends=True)
        newline = (line_ending(lines[0]) if lines else "") or "\n"
        return [l[:len(l)-len(line_ending(l))] for l in lines], newline
    return list(timing), None

def _dedup_volumes(points: "numpy array (n, 2)") -> "numpy array (m, 2)":
    # keep the first point of every run of equal volumes
    if points.shape[0] < 2:
        return points
    keep = np.concatenate(([True], points[1:, 1] != points[:-1, 1]))
    return points[keep]


@dataclasses.dataclass
class _MergeState:
    """Output of the sweep over the target timing points.

    Every line is stored together with whether it may be collapsed into the previous line.
    """
    mute_threshold: int
    current_volume: int = DEFAULT_VOLUME
    template: Optional[TimingPoint] = None
    output: list[tuple[TimingPoint, bool]] = dataclasses.field(default_factory=list)
    skipped: list[tuple[int, int]] = dataclasses.field(default_factory=list)

    def insert_before(self, point: tuple[int, int]) -> None:
        # TODO: decide whether points before the first timing point should use a default red line as template
        if self.template is None:
            self.skipped.append(point)
            return
        self.output.append((self.template.as_inherited().with_point(*point), True))
        self.current_volume = point[1]

    def overwrite_at(self, lines: list[TimingPoint], point: tuple[int, int]) -> None:
        # the last line at a time decides the volume, the ones before it stay as they are
        *held, last = lines
        for line in held:
            self.output.append((line, False))
        self.output.append((last.with_point(*point), True))
        self.current_volume = point[1]
        self.template = last

    def pass_through(self, line: TimingPoint) -> None:
        if line.volume > self.mute_threshold:
            self.output.append((line.with_point(line.time, self.current_volume), False))
        else:
            # muted by the mapper, keep it that way
            self.output.append((line, False))
        self.template = line

    def lines(self) -> list[str]:
        out: list[TimingPoint] = []
        for point, collapsible in self.output:
            # red lines are never dropped, they reset the measure
            if (
                collapsible and out and not point.uninherited
                and point.time != out[-1].time and point.state() == out[-1].state()
            ):
                continue
            out.append(point)
        return [p.to_line() for p in out]


class VolumeCurve:
    """Timed volume changes copied from one difficulty to another.

    The points are a read-only integer array of shape (n, 2), holding time in ms and volume in percent.
    """

    def __init__(self, points: Iterable[tuple[int, int]] = ()) -> None:
        arr = np.array(list(points), dtype=np.int64).reshape(-1, 2)
        if arr.shape[0] > 1 and np.any(np.diff(arr[:, 0]) < 0):
            raise ValueError("Volume curve points must be sorted by time")
        arr.setflags(write=False)
        self.points = arr

    @staticmethod
    def from_timing(timing: TimingBlock, mute_threshold: Optional[int] = DEFAULT_MUTE_THRESHOLD) -> "VolumeCurve":
        lines, _ = _split_block(timing)
        timing_points = [TimingPoint.from_line(l) for l in lines]
        points = np.array([(tp.time, tp.volume) for tp in timing_points], dtype=np.int64).reshape(-1, 2)
        if mute_threshold is not None:
            points = points[points[:, 1] > mute_threshold]
        return VolumeCurve(_dedup_volumes(points))

    @staticmethod
    def from_text(text: str, mute_threshold: Optional[int] = DEFAULT_MUTE_THRESHOLD) -> "VolumeCurve":
        return VolumeCurve.from_timing(extract_timing(text).lines, mute_threshold)

    @staticmethod
    def load(path: Union[Path, str], mute_threshold: Optional[int] = DEFAULT_MUTE_THRESHOLD) -> "VolumeCurve":
        return VolumeCurve.from_text(read_text(path), mute_threshold)

    def __len__(self) -> int:
        return self.points.shape[0]

    def __bool__(self) -> bool:
        return len(self) > 0

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for t, v in self.points:
            yield int(t), int(v)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VolumeCurve):
            return NotImplemented
        return np.array_equal(self.points, other.points)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)})"

    def apply(self, timing: TimingBlock, mute_threshold: int = DEFAULT_MUTE_THRESHOLD) -> TimingBlock:
        """Impose this curve onto existing timing points.

        Red lines keep their tempo, all lines keep their effects and sample settings.
        Points of the curve that do not fall onto a timing point get a new green line, based on the previous timing point.
        Lines at or below the mute threshold keep their volume.
        Accepts and returns either the block text or a list of lines.
        """
        if not self:
            return timing
        lines, newline = _split_block(timing)
        state = _MergeState(mute_threshold=mute_threshold)
        points = list(self)
        write_idx = 0
        targets = [TimingPoint.from_line(l) for l in lines]
        for time, group in itertools.groupby(targets, key=lambda tp: tp.time):
            at_time = list(group)
            while write_idx < len(points) and points[write_idx][0] < time:
                state.insert_before(points[write_idx])
                write_idx += 1
            if write_idx < len(points) and points[write_idx][0] == time:
                state.overwrite_at(at_time, points[write_idx])
                write_idx += 1
            else:
                for old in at_time:
                    state.pass_through(old)
        for point in points[write_idx:]:
            state.insert_before(point)

        if state.skipped:
            logger.warning(
                f"Dropped {len(state.skipped)} volume change(s) before the first timing point: "
                + ", ".join(pretty_point(p) for p in state.skipped)
            )
        new_lines = state.lines()
        if newline is None:
            return new_lines
        return newline.join(new_lines)

    def apply_to_text(self, text: str, mute_threshold: int = DEFAULT_MUTE_THRESHOLD) -> str:
        if not self:
            return text
        section = extract_timing(text)
        return section.splice(self.apply(section.lines, mute_threshold))

    def write(self, dest: Union[Path, str], mute_threshold: int = DEFAULT_MUTE_THRESHOLD) -> None:
        with timing_data(dest) as timing:
            if self:
                timing.replace(self.apply(timing.lines, mute_threshold))
