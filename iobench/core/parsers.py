"""Extract bandwidth figures from dd and fio output."""
import json
import re
from typing import Dict, Optional, Tuple

from iobench.core.errors import SpeedParseError
from iobench.core.runner import FIO_JOBS
from iobench.core.speed import parse_speed

_READ_STATUS_RE = re.compile(r"^\s*READ:(.*)$", re.MULTILINE)
_WRITE_STATUS_RE = re.compile(r"^\s*WRITE:(.*)$", re.MULTILINE)


def extract_dd_speed(output: str) -> float:
    """Return the MB/s figure from dd's summary line.

    dd prints e.g. ``1073741824 bytes (1.1 GB, 1.0 GiB) copied, 11.1 s,
    96.9 MB/s``; with ``status=progress`` earlier lines carry interim rates,
    so the last line with a rate wins.

    Raises:
        SpeedParseError: If no line carries a rate
    """
    for line in reversed((output or "").replace("\r", "\n").splitlines()):
        speed = parse_speed(line)
        if speed is not None:
            return speed
    raise SpeedParseError("dd", output or "")


def parse_fio_text(output: str) -> Tuple[Optional[float], Optional[float]]:
    """Return (read, write) MB/s from fio's ``Run status group`` lines."""
    read_match = _READ_STATUS_RE.search(output or "")
    write_match = _WRITE_STATUS_RE.search(output or "")
    read = parse_speed(read_match.group(1)) if read_match else None
    write = parse_speed(write_match.group(1)) if write_match else None
    return read, write


def load_fio_json(output: str) -> Dict:
    """Decode fio's JSON report, skipping any warnings printed before it.

    Raises:
        SpeedParseError: If no JSON document can be decoded
    """
    text = output or ""
    start = text.find("{")
    if start < 0:
        raise SpeedParseError("fio", text)
    try:
        data, _ = json.JSONDecoder().raw_decode(text[start:])
    except json.JSONDecodeError as e:
        raise SpeedParseError("fio", text) from e
    if not isinstance(data, dict):
        raise SpeedParseError("fio", text)
    return data


def parse_fio_json(output: str) -> Dict[str, Optional[float]]:
    """Map each known fio job name to its bandwidth in MB/s.

    Write jobs report ``.write.bw`` and read jobs ``.read.bw``, both in
    KiB/s. Jobs that are absent or report an error map to None.

    Raises:
        SpeedParseError: If the output is not a fio JSON report
    """
    data = load_fio_json(output)
    rw_by_job = dict(FIO_JOBS)
    speeds: Dict[str, Optional[float]] = {name: None for name in rw_by_job}

    for job in data.get("jobs", []):
        name = job.get("jobname")
        if name not in rw_by_job:
            continue
        if job.get("error"):
            continue
        section = "write" if rw_by_job[name].endswith("write") else "read"
        bw = job.get(section, {}).get("bw")
        if isinstance(bw, (int, float)) and not isinstance(bw, bool):
            speeds[name] = bw / 1024

    return speeds
