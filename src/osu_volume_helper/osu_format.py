from contextlib import contextmanager
import dataclasses
from pathlib import Path
from typing import Generator, Union

# Everything in here works on the raw text of a .osu file.
# Only the timing point block is ever parsed, the rest of the file is carried along verbatim.

OSU_EXTENSION = ".osu"
TIMING_HEADER = "[TimingPoints]"

TIMING_FIELD_COUNT = 8
# field indices of a timing point line:
#   time,beatLength,meter,sampleSet,sampleIndex,volume,uninherited,effects
TIME_FIELD = 0
BEAT_LENGTH_FIELD = 1
VOLUME_FIELD = 5
UNINHERITED_FIELD = 6

INHERITED_BEAT_LENGTH = "-100"  # 1x slider velocity
DEFAULT_VOLUME = 100


class FileAccessError(RuntimeError):
    def __init__(self, path: Union[Path, str], cause: OSError) -> None:
        super().__init__()
        self.path = Path(path)
        self.cause = cause

    def __str__(self) -> str:
        return f"Could not access {self.path}: {self.cause}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class NoParentDirectoryError(RuntimeError):
    def __init__(self, path: Union[Path, str]) -> None:
        super().__init__()
        self.path = Path(path)

    def __str__(self) -> str:
        return f"No beatmap set folder found for {self.path}, try specifying a target file"


class MalformedSectionError(ValueError):
    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason

    def __str__(self) -> str:
        return f"Not a well-formed beatmap file: {self.reason}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class MalformedTimingPointError(MalformedSectionError):
    def __init__(self, line: str, reason: str) -> None:
        super().__init__(reason)
        self.line = line

    def __str__(self) -> str:
        return f"Invalid timing point {self.line!r}: {self.reason}"


@dataclasses.dataclass(frozen=True)
class TimingPoint:
    fields: tuple[str, ...]

    @staticmethod
    def from_line(line: str) -> "TimingPoint":
        fields = tuple(line.split(","))
        if len(fields) != TIMING_FIELD_COUNT:
            raise MalformedTimingPointError(line, f"expected {TIMING_FIELD_COUNT} fields, got {len(fields)}")
        point = TimingPoint(fields)
        # make sure the fields we touch are actually numbers
        try:
            point.time, point.volume
        except ValueError as ve:
            raise MalformedTimingPointError(line, "time and volume must be integers") from ve
        return point

    def to_line(self) -> str:
        return ",".join(self.fields)

    @property
    def time(self) -> int:
        return int(self.fields[TIME_FIELD])

    @property
    def volume(self) -> int:
        return int(self.fields[VOLUME_FIELD])

    @property
    def beat_length(self) -> str:
        return self.fields[BEAT_LENGTH_FIELD]

    @property
    def uninherited(self) -> bool:
        return self.fields[UNINHERITED_FIELD] == "1"

    def with_point(self, time: int, volume: int) -> "TimingPoint":
        fields = list(self.fields)
        fields[TIME_FIELD] = str(time)
        fields[VOLUME_FIELD] = str(volume)
        return TimingPoint(tuple(fields))

    def as_inherited(self) -> "TimingPoint":
        # red lines become 1x green lines, so copies never introduce a tempo change
        if not self.uninherited and self.beat_length.startswith("-"):
            return self
        fields = list(self.fields)
        if not self.beat_length.startswith("-"):
            fields[BEAT_LENGTH_FIELD] = INHERITED_BEAT_LENGTH
        fields[UNINHERITED_FIELD] = "0"
        return TimingPoint(tuple(fields))

    def state(self) -> tuple[str, ...]:
        # everything but the time
        return self.fields[TIME_FIELD+1:]


@dataclasses.dataclass(frozen=True)
class TimingSection:
    prefix: str  # up to and including the header line
    lines: tuple[str, ...]  # timing point lines, without line endings
    suffix: str  # from the end of the last timing point line onwards
    newline: str = "\r\n"

    def splice(self, new_lines: Union[list[str], tuple[str, ...]]) -> str:
        block = self.newline.join(new_lines)
        if new_lines and not self.lines:
            # suffix starts directly with the blank separator line
            block += self.newline
        elif self.lines and not new_lines:
            # the suffix still carries the ending of the old last line
            return self.prefix + self.suffix[len(self.newline):]
        return self.prefix + block + self.suffix


def line_ending(line: str) -> str:
    if line.endswith("\r\n"):
        return "\r\n"
    if line.endswith(("\n", "\r")):
        return line[-1]
    return ""

def extract_timing(text: str) -> TimingSection:
    """Split a .osu file into the text before the timing points, the timing point lines and the text after them.

    Joining the parts with TimingSection.splice(section.lines) gives back the original text.
    """
    lines = text.splitlines(keepends=True)
    for header_idx, line in enumerate(lines):
        if line.strip() == TIMING_HEADER:
            break
    else:
        raise MalformedSectionError(f"{TIMING_HEADER} section not found")
    newline = line_ending(lines[header_idx])
    if not newline:
        raise MalformedSectionError(f"{TIMING_HEADER} section is truncated")

    start = header_idx + 1
    end = start
    while end < len(lines) and lines[end].strip():
        end += 1
    if end >= len(lines):
        raise MalformedSectionError(f"{TIMING_HEADER} section is not terminated by a blank line")

    block = lines[start:end]
    prefix = "".join(lines[:start])
    suffix = "".join(lines[end:])
    if block:
        suffix = line_ending(block[-1]) + suffix
    return TimingSection(
        prefix=prefix,
        lines=tuple(l[:len(l)-len(line_ending(l))] for l in block),
        suffix=suffix,
        newline=newline,
    )


# file access

def read_text(path: Union[Path, str]) -> str:
    try:
        # newline="" keeps \r\n as is
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as ose:
        raise FileAccessError(path, ose) from ose

def write_text(path: Union[Path, str], text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as ose:
        raise FileAccessError(path, ose) from ose

class _TimingEdit:
    # mutable holder so the body of timing_data can hand back the new lines
    def __init__(self, section: TimingSection) -> None:
        self.section = section
        self.new_lines: list[str]|None = None

    @property
    def lines(self) -> tuple[str, ...]:
        return self.section.lines

    def replace(self, new_lines: list[str]) -> None:
        self.new_lines = list(new_lines)

@contextmanager
def timing_data(path: Union[Path, str]) -> Generator[_TimingEdit, None, None]:
    # Usage:
    #   with osu_format.timing_data("diff.osu") as timing:
    #     timing.replace(do_something(timing.lines))
    text = read_text(path)
    edit = _TimingEdit(extract_timing(text))
    yield edit
    if edit.new_lines is not None:
        write_text(path, edit.section.splice(edit.new_lines))

def find_siblings(source: Union[Path, str]) -> list[Path]:
    """All .osu files in the folder of the given difficulty (including itself)"""
    try:
        source_path = Path(source).resolve(strict=True)
    except OSError as ose:
        raise FileAccessError(source, ose) from ose
    set_dir = source_path.parent
    if set_dir == source_path:
        raise NoParentDirectoryError(source_path)
    try:
        return sorted(p for p in set_dir.glob(f"*{OSU_EXTENSION}") if p.is_file())
    except OSError as ose:
        raise FileAccessError(set_dir, ose) from ose
