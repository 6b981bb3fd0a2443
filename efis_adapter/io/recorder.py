"""Airframe recordings stored as zstd compressed JSON lines."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional

import zstandard as zstd

from ..core.airframe import AirframeData
from ..core.errors import RecordingError

# Malformed lines surface as one of these while decoding.
_DECODE_ERRORS = (ValueError, KeyError, TypeError)


class AirframeRecording:
    """A ``.jsonl.zst`` file holding one airframe record per line.

    Use it as a context manager to write records; iterate over it to read
    them back. Read failures of any kind surface as :class:`RecordingError`.
    """

    def __init__(self, path: str | Path, *, level: int = 3) -> None:
        self.path = Path(path)
        self.level = level
        self.count = 0
        self._fp: Optional[BinaryIO] = None
        self._writer: Optional[zstd.ZstdCompressionWriter] = None

    def __enter__(self) -> "AirframeRecording":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fp = open(self.path, "wb")
        self._writer = zstd.ZstdCompressor(level=self.level, write_checksum=True).stream_writer(self._fp)
        self.count = 0
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def record(self, data: AirframeData) -> None:
        if self._writer is None:
            raise RecordingError(f"recording {self.path} is not open for writing")
        self._writer.write(json.dumps(data.to_dict(), separators=(",", ":")).encode("utf-8") + b"\n")
        self.count += 1

    def record_all(self, records: Iterable[AirframeData]) -> int:
        for data in records:
            self.record(data)
        return self.count

    def close(self) -> None:
        if self._writer is not None:
            self._writer.flush(zstd.FLUSH_FRAME)
            self._writer.close()
            self._writer = None
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __iter__(self) -> Iterator[AirframeData]:
        try:
            with open(self.path, "rb") as fp:
                lines = io.TextIOWrapper(zstd.ZstdDecompressor().stream_reader(fp), encoding="utf-8")
                for lineno, line in enumerate(lines, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        payload = json.loads(line)
                        if not isinstance(payload, dict):
                            raise TypeError(f"expected an object, got {type(payload).__name__}")
                        data = AirframeData.from_mapping(payload)
                    except _DECODE_ERRORS as exc:
                        raise RecordingError(f"{self.path}:{lineno}: invalid record: {exc}") from exc
                    yield data
        except (OSError, zstd.ZstdError, UnicodeDecodeError) as exc:
            raise RecordingError(f"cannot read recording {self.path}: {exc}") from exc
