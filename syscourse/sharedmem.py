"""Named shared memory segments and a name/e-mail directory kept in one.

A segment is a file of fixed size in the system's shared memory
directory (or the temporary directory where there is none), mapped into
memory. It outlives the process, so later runs see what earlier runs
wrote until the segment is deleted.
"""

from __future__ import annotations

import mmap
import os
import sys
import tempfile
import time
from pathlib import Path
from typing import Sequence

SHM_SIZE = 1024
DEFAULT_SEGMENT = "/something_shared"
EMAIL_SEGMENT = "/email_directory"
NRECS = 21
STRSIZE = 128
_RECORD_SIZE = 2 * STRSIZE
EMAIL_SHM_SIZE = NRECS * _RECORD_SIZE
_MODE = 0o600

ORIGINAL_DATA: tuple[tuple[str, str], ...] = (
    ("Avery Quill", "aquill@example.com"),
    ("Blake Marrow", "bmarrow@example.com"),
    ("Casey Thorn", "cthorn@example.com"),
    ("Dana Whitlock", "dwhitlock@example.com"),
    ("Emery Vance", "evance@example.com"),
    ("Finley Rook", "frook@example.com"),
    ("Gray Ashby", "gashby@example.com"),
    ("Harper Lorne", "hlorne@example.com"),
    ("Indigo Pell", "ipell@example.com"),
    ("Jordan Keel", "jkeel@example.com"),
    ("Kendall Frost", "kfrost@example.com"),
    ("Logan Brisk", "lbrisk@example.com"),
    ("Morgan Tally", "mtally@example.com"),
    ("Noel Harrow", "nharrow@example.com"),
    ("Oakley Fenn", "ofenn@example.com"),
    ("Parker Dune", "pdune@example.com"),
    ("Quinn Mallow", "qmallow@example.com"),
    ("Reese Corbin", "rcorbin@example.com"),
    ("Sawyer Lark", "slark@example.com"),
    ("Taylor Brook", "tbrook@example.com"),
    ("Umber Hale", "uhale@example.com"),
)


def _shm_dir() -> Path:
    shm = Path("/dev/shm")
    return shm if shm.is_dir() else Path(tempfile.gettempdir())


def _segment_path(name: str) -> Path:
    stem = name[1:] if name.startswith("/") else name
    if not stem or "/" in stem or stem in (".", ".."):
        raise ValueError(f"invalid segment name {name!r}: one leading '/' and no other slashes")
    return _shm_dir() / stem


def _cstring(raw: bytes) -> bytes:
    end = raw.find(b"\0")
    return raw if end == -1 else raw[:end]


class SharedSegment:
    """A named, fixed-size block of shared memory holding a NUL-terminated string."""

    def __init__(self, name: str = DEFAULT_SEGMENT, size: int = SHM_SIZE) -> None:
        if size < 1:
            raise ValueError(f"size must be positive, got {size}")
        self.name = name
        self.size = size
        self.path = _segment_path(name)
        fd = os.open(self.path, os.O_CREAT | os.O_RDWR, _MODE)
        try:
            os.ftruncate(fd, size)
            self._map: mmap.mmap | None = mmap.mmap(fd, size)
        finally:
            os.close(fd)

    def _buffer(self) -> mmap.mmap:
        if self._map is None:
            raise ValueError(f"segment {self.name!r} is closed")
        return self._map

    def read(self) -> str:
        """Return the contents up to the first NUL byte."""
        return _cstring(self._buffer()[:]).decode("utf-8", errors="replace")

    def write(self, data: str | bytes) -> int:
        """Store data, cut to the segment size and padded with NULs; return bytes stored."""
        buffer = self._buffer()
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        chunk = raw[: self.size]
        buffer[:] = chunk.ljust(self.size, b"\0")
        return len(chunk)

    def close(self) -> None:
        """Unmap the segment; its contents remain for others."""
        if self._map is not None:
            self._map.close()
            self._map = None

    def __enter__(self) -> SharedSegment:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def delete_segment(name: str = DEFAULT_SEGMENT) -> bool:
    """Remove the named segment; return whether it existed."""
    try:
        _segment_path(name).unlink()
    except FileNotFoundError:
        return False
    return True


def _field(value: str) -> bytes:
    raw = value.encode("utf-8")
    if len(raw) >= STRSIZE:
        raise ValueError(f"{value!r} does not fit in {STRSIZE - 1} bytes")
    return raw.ljust(STRSIZE, b"\0")


class EmailDirectory:
    """Name to e-mail records stored in a shared segment of NRECS fixed-size entries."""

    def __init__(self, name: str = EMAIL_SEGMENT) -> None:
        self._segment = SharedSegment(name, EMAIL_SHM_SIZE)
        self.name = name

    def _records(self):
        buffer = self._segment._buffer()
        for i in range(NRECS):
            start = i * _RECORD_SIZE
            yield start, _cstring(buffer[start : start + STRSIZE])

    def restore(self) -> None:
        """Overwrite every record with the original data."""
        buffer = self._segment._buffer()
        for i, (person, email) in enumerate(ORIGINAL_DATA):
            start = i * _RECORD_SIZE
            buffer[start : start + _RECORD_SIZE] = _field(person) + _field(email)

    def lookup(self, name: str) -> list[str]:
        """Return the e-mail of every record whose name matches, in record order."""
        key = name.encode("utf-8")
        buffer = self._segment._buffer()
        return [
            _cstring(buffer[start + STRSIZE : start + _RECORD_SIZE]).decode(
                "utf-8", errors="replace"
            )
            for start, stored in self._records()
            if stored == key
        ]

    def change(self, name: str, email: str) -> int:
        """Set the e-mail of every record named name; return how many changed."""
        new_email = _field(email)
        key = name.encode("utf-8")
        buffer = self._segment._buffer()
        changed = 0
        for start, stored in self._records():
            if stored == key:
                buffer[start + STRSIZE : start + _RECORD_SIZE] = new_email
                changed += 1
        return changed

    def close(self) -> None:
        """Detach from the segment."""
        self._segment.close()

    def __enter__(self) -> EmailDirectory:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _split_name(args: Sequence[str], default: str) -> tuple[str, list[str]]:
    name = default
    rest = []
    for arg in args:
        if arg.startswith("--name="):
            name = arg.split("=", 1)[1]
        else:
            rest.append(arg)
    return name, rest


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: shmdemo [--name=NAME] [data_to_write | -watch | -delete]."""
    name, args = _split_name(sys.argv[1:] if argv is None else argv, DEFAULT_SEGMENT)
    if len(args) > 1:
        prog = "shmdemo"
        print(f"usage: {prog}")
        print("  print contents of shared memory segment")
        print(f"usage: {prog} [data_to_write]")
        print("  write new contents of to shared memory segment")
        print(f"usage: {prog} -watch")
        print("  report shared memory contents every second")
        print(f"usage: {prog} -delete")
        print("  delete shared memory segment")
        return 1

    if args == ["-delete"]:
        print("removing shared memory")
        delete_segment(name)
        return 0

    with SharedSegment(name, SHM_SIZE) as segment:
        if args == ["-watch"]:
            try:
                while True:
                    print(f"segment contains: '{segment.read()}'", flush=True)
                    time.sleep(1)
            except KeyboardInterrupt:
                pass
        elif args:
            print(f"writing to segment: '{args[0]}'")
            segment.write(args[0])
        else:
            print(f"segment contains: '{segment.read()}'")
    return 0


def email_main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: email [--name=NAME] restore | lookup <name> | change <name> <email>."""
    segment_name, args = _split_name(sys.argv[1:] if argv is None else argv, EMAIL_SEGMENT)
    command = args[0] if args else None
    needed = {"restore": 1, "lookup": 2, "change": 3}
    if command is None or (command in needed and len(args) < needed[command]):
        prog = "email"
        print(f"usage: {prog} restore")
        print(f"       {prog} lookup <name>")
        print(f"       {prog} change <name> <email>")
        return 1
    if command not in needed:
        print(f"Unknown command '{command}'")
        return 1

    with EmailDirectory(segment_name) as directory:
        if command == "restore":
            print(f"Restoring shared memory {segment_name}")
            directory.restore()
        elif command == "lookup":
            person = args[1]
            print(f"Looking up {person}")
            found = directory.lookup(person)
            for email in found:
                print(f"Found: {email}")
            if not found:
                print("Not found")
        else:
            person, email = args[1], args[2]
            print(f"Changing '{person}' to '{email}'")
            try:
                changed = directory.change(person, email)
            except ValueError as exc:
                print(exc)
                return 1
            for _ in range(changed):
                print("Alteration complete")
            if not changed:
                print("Not found")
    return 0