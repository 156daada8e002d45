import logging
from typing import Any

logger = logging.getLogger("OVH")

def parse_volume(val: str) -> int:
    # used as argparse type, so ValueError becomes a usage error before any file is touched
    if not val:
        raise ValueError("Value empty")
    val = val.strip()
    if val.endswith("%"):
        val = val[:-1]
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Not an integer volume: {val!r}")

def pretty_point(point: tuple[int, int]) -> str:
    time, volume = point
    sign = "-" if time < 0 else ""
    minutes, ms = divmod(abs(time), 60000)
    return f"{sign}{minutes:d}:{ms/1000:06.3f} @ {volume}%"

def pretty_list(data: list[Any]) -> str:
    if not data:
        return ""
    if len(data) == 1:
        return str(data[0])
    return ", ".join(map(str, data[:-1])) + f" and {data[-1]}"
