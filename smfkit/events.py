# Implements the track chunk and the events inside it
from __future__ import annotations
import io
import logging
import struct
import typing
from dataclasses import dataclass, field
import line_profiler
from .base import (
    ChunkType,
    Event,
    EventType,
    MidiData,
    VariableLengthInt,
    encode_vlv,
    partial_decode_vlv,
    read_byte,
    read_bytes,
)
from .exceptions import InvalidDataError, MagicMismatchError, MidiEOFError, NoPreviousEventError, UnknownEventError
from .message import MessageType, MidiMessage
from .meta import MetaEventEndOfTrack, read_meta_event

logger = logging.getLogger(__name__)


### Events ###


@dataclass(frozen=True)
class SysexEvent(Event):
    """A system exclusive event: F0 or F7, then a variable length integer length, then the payload"""
    event_type = EventType.SYSEX_EVENT

    status_byte: int
    data: bytes  # Should be all the data after the length

    def __post_init__(self):
        if self.status_byte not in (0xF0, 0xF7):
            raise InvalidDataError(f'Status byte 0x{self.status_byte:02X} does not start a SysEx event')
        return super().__post_init__()

    @property
    def is_escape(self) -> bool:
        """Returns True if this is an F7 event, used for sysex continuation packets and escaped bytes"""
        return self.status_byte == 0xF7

    def get_data(self) -> bytes:
        return bytes([self.status_byte]) + encode_vlv(len(self.data)) + self.data


@dataclass(frozen=True)
class TrackEvent(MidiData):
    """A delta time, in ticks since the previous event of the track, and the event it applies to"""
    delta_time: VariableLengthInt
    event: Event

    @property
    def time(self) -> int:
        """Returns the delta time in ticks"""
        return self.delta_time.value

    @staticmethod
    def create(delta: int, event: Event) -> TrackEvent:
        return TrackEvent(VariableLengthInt.from_int(delta), event)

    def get_data(self, running_status: int | None = None) -> bytes:
        """Returns the delta time and the event as bytes

        The status byte of a channel message is left out if it matches running_status"""
        data = self.event.get_data()
        if isinstance(self.event, MidiMessage) and self.event.status_byte == running_status:
            data = data[1:]
        return self.delta_time.data + data


@line_profiler.profile
def decode_event(infile: typing.BinaryIO, prior_status: int | None) -> tuple[Event, int]:
    """Decodes one event (without its delta time) from the infile

    prior_status is the status byte of the previous event in the track, or None at the start of a track.
    Returns the event and the status byte to carry forward to the next event."""
    status_byte = read_byte(infile)
    if status_byte < 0x80:
        # Running status: what we read is already the first data byte
        if prior_status is None:
            raise NoPreviousEventError()
        first_data = status_byte
        status_byte = prior_status
    else:
        first_data = read_byte(infile)

    kind = status_byte >> 4
    event: Event
    if 0x8 <= kind <= 0xE:
        bs = [status_byte, first_data]
        if MessageType(status_byte & 0xF0).size == 3:
            bs.append(read_byte(infile))
        event = MidiMessage.from_bytes(bs)
    elif status_byte in (0xF0, 0xF7):
        length = partial_decode_vlv(infile, first_data)
        event = SysexEvent(status_byte, read_bytes(infile, length))
    elif status_byte == 0xFF:
        event = read_meta_event(infile, first_data)
    else:
        raise UnknownEventError(status_byte)
    return event, status_byte


### Chunks ###


@dataclass(frozen=True)
class TrackChunk(MidiData):
    """Track chunk class"""
    chunk_type: ChunkType = field(default=ChunkType.TRACK, init=False)
    size: int  # The declared length of the event stream, as read from the chunk header
    events: list[TrackEvent]

    @property
    def has_end_of_track(self) -> bool:
        return bool(self.events) and isinstance(self.events[-1].event, MetaEventEndOfTrack)

    def get_data(self, use_running_status: bool = False) -> bytes:
        body = encode_events(self.events, use_running_status=use_running_status)
        return struct.pack('>4sL', ChunkType.TRACK.tag, len(body)) + body


def encode_events(events: typing.Iterable[TrackEvent], use_running_status: bool = False) -> bytes:
    """Encodes the events of a track, optionally leaving out repeated status bytes"""
    out = bytearray()
    running_status: int | None = None
    for event in events:
        out += event.get_data(running_status if use_running_status else None)
        running_status = event.event.status_byte
    return bytes(out)


def read_chunk_header(infile: typing.BinaryIO, chunk_type: ChunkType) -> int:
    """Checks the chunk tag and returns the declared length"""
    header = infile.read(8)
    if len(header) < 8:
        raise MidiEOFError('Not enough data to read chunk header')
    name, size = struct.unpack('>4sL', header)
    if name != chunk_type.tag:
        raise MagicMismatchError(chunk_type.tag, name)
    return size


@line_profiler.profile
def _read_events(infile: typing.BinaryIO, size: int) -> list[TrackEvent]:
    """Decodes events until size bytes have been consumed

    The size only decides when to stop between events, a single event is never cut short by it"""
    consumed = 0
    last_status = None
    track: list[TrackEvent] = []
    while consumed < size:
        start = infile.tell()
        delta_time = VariableLengthInt.read(infile)
        event, last_status = decode_event(infile, last_status)
        track.append(TrackEvent(delta_time, event))
        consumed += infile.tell() - start

    if consumed > size:
        logger.warning(f"Last event overran the declared track length by {consumed - size} bytes")
    if not track or not isinstance(track[-1].event, MetaEventEndOfTrack):
        logger.warning("Track does not end with an end of track event")
    logger.debug(f"Decoded {len(track)} events from a {size} byte track")
    return track


def read_track(infile: typing.BinaryIO) -> TrackChunk:
    """Reads the infile and returns a track chunk

    The events are decoded straight from the infile, so it needs to support tell()"""
    size = read_chunk_header(infile, ChunkType.TRACK)
    return TrackChunk(size, _read_events(infile, size))


def decode_events(data: bytes) -> list[TrackEvent]:
    """Decodes an in-memory event stream, i.e. the contents of a track chunk after its header"""
    return _read_events(io.BytesIO(data), len(data))
