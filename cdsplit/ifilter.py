import os
from typing import Optional, BinaryIO
from cdsplit.error_number import ErrorNumber, SourceReadError
import logging

logger = logging.getLogger(__name__)


class IFilter:
    """
    Seek+read access to one source image file. The stream is opened lazily
    and shared by every track declared against the same FILE.
    """

    def __init__(self, path: str, writable: bool = False):
        self._path = path
        self._writable = writable
        self._stream: Optional[BinaryIO] = None

    @property
    def base_path(self) -> str:
        return self._path

    @property
    def filename(self) -> str:
        return os.path.basename(self._path)

    @property
    def parent_folder(self) -> str:
        return os.path.dirname(self._path)

    @property
    def length(self) -> int:
        if self._stream and not self._stream.closed:
            self._stream.flush()
        try:
            return os.path.getsize(self._path)
        except OSError as ex:
            raise SourceReadError(f"Unable to stat \"{self._path}\": {ex}", ErrorNumber.NoSuchFile) from ex

    def get_data_fork_stream(self) -> BinaryIO:
        if not self._stream or self._stream.closed:
            try:
                self._stream = open(self._path, 'rb+' if self._writable else 'rb')
            except OSError as ex:
                raise SourceReadError(f"Unable to open \"{self._path}\": {ex}", ErrorNumber.CannotOpenFile) from ex
        return self._stream

    def read_at(self, offset: int, size: int) -> bytes:
        stream = self.get_data_fork_stream()
        try:
            stream.seek(offset)
            data = stream.read(size)
        except OSError as ex:
            raise SourceReadError(f"Read of {size} bytes at {offset} in \"{self._path}\" failed: {ex}") from ex
        if len(data) != size:
            raise SourceReadError(f"Expected to read {size} bytes at {offset} in \"{self._path}\", "
                                  f"but read {len(data)} bytes")
        return data

    def close(self):
        if self._stream:
            self._stream.close()
            self._stream = None

    @classmethod
    def open_caseless(cls, directory: str, name: str, writable: bool = False) -> 'IFilter':
        """
        Resolves a FILE name next to the layout sheet. Falls back to a
        case-insensitive match, since sheets made on other systems often
        disagree with the real file casing.
        """
        directory = directory or os.curdir
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return cls(path, writable)

        lowname = name.lower()
        try:
            entries = os.listdir(directory)
        except OSError as ex:
            raise SourceReadError(f"Unable to open \"{name}\": {ex}", ErrorNumber.NoSuchFile) from ex

        for entry in entries:
            if entry.lower() == lowname and os.path.isfile(os.path.join(directory, entry)):
                logger.debug(f" Resolved \"{name}\" to \"{entry}\"")
                return cls(os.path.join(directory, entry), writable)

        raise SourceReadError(f"Unable to open \"{name}\"", ErrorNumber.NoSuchFile)
