from __future__ import annotations
import io
import logging
import struct
import typing
from dataclasses import dataclass, field
from pathlib import Path
from .base import ChunkType, MidiData
from .events import TrackChunk, TrackEvent, read_chunk_header, read_track
from .exceptions import MidiDecodeError, MidiEOFError, TrackCountMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderChunk(MidiData):
    """Header chunk class"""

    chunk_type: ChunkType = field(default=ChunkType.HEADER, init=False)
    format_type: int
    num_tracks: int
    division: int

    def __post_init__(self):
        if not (0 <= self.format_type <= 2):
            raise MidiDecodeError(f"Format type {self.format_type} is out of range.")
        if not (1 <= self.num_tracks <= 65535):
            raise MidiDecodeError(f"Number of tracks {self.num_tracks} is out of range.")
        if not (0 <= self.division <= 65535):
            raise MidiDecodeError(f"Division {self.division} is out of range.")

    @property
    def ticks_per_quarter_note(self) -> int | None:
        """Ticks per quarter note, or None if the division is SMPTE based"""
        if self.division & 0x8000:
            return None
        return self.division

    @property
    def smpte(self) -> tuple[int, int] | None:
        """(frames per second, ticks per frame) if the division is SMPTE based"""
        if not self.division & 0x8000:
            return None
        fps = (self.division >> 8) - 0x100
        return -fps, self.division & 0xFF

    def get_data(self) -> bytes:
        """Returns the underlying data as bytes"""
        return struct.pack('>4sLHHH', ChunkType.HEADER.tag, 6, self.format_type, self.num_tracks, self.division)


def read_header_chunk(infile: typing.BinaryIO) -> HeaderChunk:
    size = read_chunk_header(infile, ChunkType.HEADER)
    if size < 6:
        raise MidiDecodeError(f'Incorrect header size for a MIDI file: {size}')
    data = infile.read(size)
    if len(data) < size:
        raise MidiEOFError('Not enough data to read header chunk')
    format_, ntrks, division = struct.unpack('>HHH', data[:6])
    return HeaderChunk(format_, ntrks, division)


class Midifile:
    """A class for midi files: a header followed by the track chunks it declares"""

    def __init__(self, header: HeaderChunk, tracks: list[TrackChunk]):
        self._header = header
        self._tracks = tracks

    @staticmethod
    def read(infile: typing.BinaryIO) -> Midifile:
        """Reads the header and file chunks. The first broken track aborts the whole read."""
        header = read_header_chunk(infile)
        logger.debug(f"Format {header.format_type}, {header.num_tracks} tracks, division {header.division}")
        tracks: list[TrackChunk] = []
        for _ in range(header.num_tracks):
            tracks.append(read_track(infile))
        if infile.read(1) != b'':
            infile.seek(-1, io.SEEK_CUR)
            logger.warning(f"Ignoring data after the {header.num_tracks} declared tracks")
        return Midifile(header, tracks)

    @staticmethod
    def from_path(path: str | Path) -> Midifile:
        path = Path(path)
        if not path.is_file():
            raise MidiDecodeError(f"File {path} does not exist")
        if path.suffix != ".mid" and path.suffix != ".midi":
            raise MidiDecodeError(f"File {path} is not a midi file: found {path.suffix}")
        with open(path, "rb") as f:
            return Midifile.read(f)

    def _file_check(self):
        """Check that the header agrees with the tracks before writing"""
        if self._header.num_tracks != len(self._tracks):
            raise TrackCountMismatchError(self._header.num_tracks, len(self._tracks))
        for i, track in enumerate(self._tracks):
            if not track.has_end_of_track:
                logger.warning(f"Track {i} does not end with an end of track event")

    def get_data(self, use_running_status: bool = False) -> bytes:
        self._file_check()
        data = self._header.get_data()
        for track in self._tracks:
            data += track.get_data(use_running_status=use_running_status)
        return data

    def save(self, path: str | Path, use_running_status: bool = False):
        data = self.get_data(use_running_status=use_running_status)
        with open(path, "wb") as f:
            f.write(data)

    @property
    def header(self) -> HeaderChunk:
        return self._header

    @property
    def format_type(self):
        """Format type of the midi file"""
        return self._header.format_type

    @property
    def num_tracks(self):
        """Number of tracks declared by the header"""
        return self._header.num_tracks

    @property
    def division(self):
        """Division of the midi file"""
        return self._header.division

    @property
    def tracks(self) -> list[TrackChunk]:
        # Shallow copy is good enough since chunks are immutable
        return list(self._tracks)

    @property
    def events(self) -> typing.Iterator[TrackEvent]:
        for track in self._tracks:
            for event in track.events:
                yield event
