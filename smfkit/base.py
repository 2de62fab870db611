from __future__ import annotations
import enum
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from . import config
from .exceptions import (
    InvalidDataError,
    MidiDecodeError,
    MidiEOFError,
    NumberTooBigError,
    VLVTooBigError,
)


class ChunkType(enum.IntEnum):
    """MIDI chunk types"""

    HEADER = 0x00
    TRACK = 0x01

    @property
    def tag(self) -> bytes:
        """The 4-byte ASCII tag that opens a chunk of this type"""
        return b'MThd' if self is ChunkType.HEADER else b'MTrk'

    def __repr__(self) -> str:
        return self.name


class EventType(enum.IntEnum):
    """MIDI event types"""

    MIDI_EVENT = 0x00
    SYSEX_EVENT = 0x01
    META_EVENT = 0x02

    def __repr__(self) -> str:
        return self.name


### Variable length integers ###

def vlv_length(value: int) -> int:
    """Number of bytes in the canonical encoding of value"""
    if value < 0:
        raise ValueError(f'Variable length integer value out of range: {value}')
    if value < 1 << 7:
        return 1
    if value < 1 << 14:
        return 2
    if value < 1 << 21:
        return 3
    if value < 1 << 28:
        return 4
    raise NumberTooBigError(value)


def encode_vlv(value: int) -> bytes:
    """Encodes value using the shortest possible variable length encoding"""
    length = vlv_length(value)
    bts: list[int] = []
    for idx in range(length):
        byte = (value >> ((length - idx - 1) * 7)) & 0x7F
        if idx + 1 < length:
            byte |= 0x80
        bts.append(byte)
    return bytes(bts)


def partial_decode_vlv(infile: typing.BinaryIO, first_byte: int) -> int:
    """Decodes a variable length integer whose first byte has already been consumed"""
    value = 0
    byte = first_byte
    for size in range(1, 5):
        value = (value << 7) | (byte & 0x7F)
        if byte < 0x80:
            return value
        if size == 4:
            break
        byte = read_byte(infile)
    raise VLVTooBigError()


def decode_vlv(infile: typing.BinaryIO) -> int:
    """Decodes a variable length integer from the infile

    Non-minimal encodings such as 0x80 0x00 are accepted, but no more than 4 bytes are read"""
    return partial_decode_vlv(infile, read_byte(infile))


@dataclass(frozen=True)
class VariableLengthInt:
    """Variable length integer class as specified in the MIDI 1.0 specification

    The value is kept, not the bytes it was read from: `data` is always the canonical encoding."""

    value: int

    def __post_init__(self):
        vlv_length(self.value)

    @property
    def data(self) -> bytes:
        return encode_vlv(self.value)

    @staticmethod
    def read(infile: typing.BinaryIO) -> VariableLengthInt:
        """Reads a variable length integer from the infile"""
        return VariableLengthInt(decode_vlv(infile))

    @staticmethod
    def partial_read(infile: typing.BinaryIO, first_byte: int) -> VariableLengthInt:
        """Reads a variable length integer whose first byte was already taken from the infile"""
        return VariableLengthInt(partial_decode_vlv(infile, first_byte))

    @staticmethod
    @lru_cache(maxsize=1000)
    def from_int(value: int) -> VariableLengthInt:
        """Creates a VariableLengthInt from an integer"""
        return VariableLengthInt(value)

    def __repr__(self):
        return self.value.__repr__()


### Base classes ###

@dataclass(frozen=True)
class MidiData(ABC):
    """Base class for any structured collection of MIDI data"""

    @abstractmethod
    def get_data(self) -> bytes:
        """Returns the underlying data as bytes

        For chunks, this includes the chunk header, length, and contents
        For events, this includes the status byte and the event data but not the delta time"""
        raise NotImplementedError

    def __post_init__(self):
        # Exists to apease mypy
        pass


@dataclass(frozen=True)
class Event(MidiData):
    """Base class of everything that can follow a delta time in a track

    Subclasses set event_type and expose the status byte they are written with as status_byte"""
    event_type: typing.ClassVar[EventType]


def check_range(name: str, value: int, low: int, high: int):
    if not (low <= value <= high):
        raise InvalidDataError(f"{name} {value} is out of range.")


### Byte readers ###

def read_byte(infile: typing.BinaryIO) -> int:
    byte = infile.read(1)
    if byte == b'':
        raise MidiEOFError('EOF reached while reading byte')
    return ord(byte)


def read_bytes(infile: typing.BinaryIO, size: int, max_length: int | None = None) -> bytes:
    if max_length is None:
        max_length = config.MAX_PAYLOAD_LENGTH
    if size > max_length:
        raise MidiDecodeError('Message length {} exceeds maximum length {}'.format(size, max_length))
    data = infile.read(size)
    if len(data) < size:
        raise MidiEOFError(f'EOF reached while reading {size} bytes, got {len(data)}')
    return data


def skip_bytes(infile: typing.BinaryIO, size: int):
    """Discards size bytes, reading them so that truncated input is still reported"""
    while size > 0:
        chunk = infile.read(min(size, 65536))
        if chunk == b'':
            raise MidiEOFError(f'EOF reached while skipping {size} bytes')
        size -= len(chunk)
