"""SD card access for sketches, backed by a host directory."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path
from typing import BinaryIO

from smcesim.arduino import ArduinoError
from smcesim.board_view import BoardView, Link
from smcesim.wstring import String


class FileMode(IntFlag):
    """How a file is opened."""

    READ = 1
    WRITE = 2


def _open_stream(path: Path, mode: FileMode) -> BinaryIO | None:
    mode = FileMode(mode)
    if FileMode.READ in mode and FileMode.WRITE in mode:
        flags = "r+b"
    elif FileMode.READ in mode:
        flags = "rb"
    elif FileMode.WRITE in mode:
        flags = "wb"
    else:
        return None
    try:
        return open(path, flags, buffering=0)  # noqa: SIM115 - owned by File
    except OSError:
        return None


def _directory_entries(path: Path) -> Iterator[Path]:
    return iter(sorted(path.iterdir()))


@dataclass
class _Opened:
    path: Path
    filename: str
    stream: BinaryIO | None = None
    entries: Iterator[Path] | None = None


class File:
    """A file or directory on the SD card; false when nothing is open."""

    def __init__(self) -> None:
        self._opened: _Opened | None = None

    @classmethod
    def _directory(cls, path: Path) -> File:
        file = cls()
        file._opened = _Opened(path, path.name, entries=_directory_entries(path))
        return file

    @classmethod
    def _regular(cls, path: Path, stream: BinaryIO) -> File:
        file = cls()
        file._opened = _Opened(path, path.name, stream=stream)
        return file

    def __enter__(self) -> File:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._opened is not None:
            self.close()

    def __bool__(self) -> bool:
        return self._opened is not None

    def _require(self, call: str) -> _Opened:
        if self._opened is None:
            raise ArduinoError(f"File::{call}: File not opened")
        return self._opened

    def _stream(self, call: str) -> BinaryIO:
        stream = self._require(call).stream
        if stream is None:
            raise ArduinoError(f"File::{call}: File is a directory")
        return stream

    def name(self) -> str:
        """Base name of the open file or directory."""
        return self._require("name()").filename

    def position(self) -> int:
        """Current byte offset."""
        return self._stream("position()").tell()

    def seek(self, pos: int) -> None:
        """Move to byte offset ``pos``, which may not lie past the end."""
        stream = self._stream(f"seek({pos})")
        max_pos = self.size()
        if not 0 <= pos <= max_pos:
            raise ArduinoError(
                f"File::seek({pos}): Target cursor position is out of bounds (size() == {max_pos})"
            )
        stream.seek(pos)

    def size(self) -> int:
        """Size of the file in bytes."""
        stream = self._stream("size()")
        saved = stream.tell()
        end = stream.seek(0, 2)
        stream.seek(saved)
        return end

    def is_directory(self) -> bool:
        """Whether this is an open directory."""
        return self._require("isDirectory()").entries is not None

    def open_next_file(self, mode: FileMode = FileMode.READ) -> File:
        """Open the next entry of this directory; a false File at the end."""
        entries = self._require("openNextFile()").entries
        if entries is None:
            raise ArduinoError("File::openNextFile(): File is not a directory")
        entry = next(entries, None)
        if entry is None:
            return File()
        try:
            if entry.is_file():
                stream = _open_stream(entry, mode)
                return File() if stream is None else File._regular(entry, stream)
            if entry.is_dir():
                return File._directory(entry)
        except OSError:
            pass
        return File()

    def rewind_directory(self) -> None:
        """Restart iteration over this directory."""
        opened = self._require("rewindDirectory()")
        if opened.entries is None:
            raise ArduinoError("File::rewindDirectory(): File is not a directory")
        opened.entries = _directory_entries(opened.path)

    def close(self) -> None:
        """Close the file or directory."""
        opened = self._require("close()")
        if opened.stream is not None:
            opened.stream.close()
        self._opened = None

    def available(self) -> int:
        """Bytes left between the current position and the end."""
        self._stream("available()")
        return self.size() - self.position()

    def flush(self) -> None:
        """Push written data to the host file."""
        self._stream("flush()").flush()

    def peek(self) -> int:
        """Next byte without consuming it, or -1."""
        stream = self._stream("peek()")
        try:
            data = stream.read(1)
        except OSError:
            return -1
        if not data:
            return -1
        stream.seek(-1, 1)
        return data[0]

    def read(self) -> int:
        """Consume and return the next byte, or -1."""
        stream = self._stream("read()")
        try:
            data = stream.read(1)
        except OSError:
            return -1
        return data[0] if data else -1

    def read_bytes(self, size: int) -> bytes:
        """Consume and return up to ``size`` bytes."""
        stream = self._stream(f"read(?, {size})")
        try:
            return stream.read(size) or b""
        except OSError:
            return b""

    def write(self, data: int | bytes | str | String) -> int:
        """Write a byte or a buffer; return the number of bytes written."""
        if isinstance(data, int):
            payload = bytes([data & 0xFF])
        elif isinstance(data, (str, String)):
            payload = str(data).encode()
        else:
            payload = bytes(data)
        stream = self._stream(f"write(?, {len(payload)})")
        try:
            written = stream.write(payload)
        except OSError:
            return 0
        return written or 0


def _relative(path: str) -> str:
    return path[1:] if path.startswith("/") else path


class SDClass:
    """The SD card reached over SPI at a chip-select pin."""

    def __init__(self, board_view: BoardView) -> None:
        self._board_view = board_view
        self._cspin = 0
        self._begun = False

    def _root_for(self, cspin: int) -> str:
        return self._board_view.storage_get_root(Link.SPI, cspin)

    def _path(self, path: str) -> Path:
        return Path(self._root_for(self._cspin)) / _relative(path)

    def begin(self, cspin: int = 0) -> None:
        """Attach to the card at chip-select pin ``cspin``."""
        if self._begun:
            raise ArduinoError(f"SDClass::begin({cspin}): already begun")
        if not self._root_for(cspin):
            raise ArduinoError(f"SDClass::begin({cspin}): no such device")
        self._cspin = cspin
        self._begun = True

    def exists(self, path: str) -> bool:
        """Whether ``path`` exists on the card."""
        if not path:
            return False
        return self._path(path).exists()

    def open(self, path: str, mode: FileMode = FileMode.READ) -> File:
        """Open a file or directory; a false File when that fails."""
        if not path:
            return File()
        fspath = self._path(path)
        if fspath.is_dir():
            return File._directory(fspath)
        stream = _open_stream(fspath, mode)
        return File() if stream is None else File._regular(fspath, stream)

    def remove(self, path: str) -> bool:
        """Delete a file; directories are refused."""
        if not path:
            return False
        fspath = self._path(path)
        if fspath.is_dir():
            return False
        fspath.unlink(missing_ok=True)
        return True

    def mkdir(self, path: str) -> bool:
        """Create a directory and its parents; False if it already exists."""
        if not path or path == "/":
            return False
        fspath = self._path(path)
        try:
            fspath.mkdir(parents=True)
        except FileExistsError:
            if fspath.is_dir():
                return False
            raise
        return True

    def rmdir(self, path: str) -> bool:
        """Remove ``path`` unless it is a directory, in which case nothing happens."""
        if not path or path == "/":
            return False
        fspath = self._path(path)
        if fspath.is_dir():
            return False
        if fspath.exists() or fspath.is_symlink():
            fspath.unlink()
        return True