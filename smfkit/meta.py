# Implements the MIDI meta events
from __future__ import annotations
import enum
import math
import typing
from abc import abstractmethod
from dataclasses import dataclass
from . import config
from .base import Event, EventType, check_range, decode_vlv, encode_vlv, read_bytes, skip_bytes
from .exceptions import KeySignatureUnknownKeyError, UnexpectedMetaEventLengthError


class MetaEventType(enum.IntEnum):
    """MIDI meta event types"""
    SEQUENCE_NUMBER = 0x00
    TEXT_EVENT = 0x01
    COPYRIGHT_NOTICE = 0x02
    TRACK_NAME = 0x03
    INSTRUMENT_NAME = 0x04
    LYRIC = 0x05
    MARKER = 0x06
    CUE_POINT = 0x07
    PROGRAM_NAME = 0x08
    DEVICE_NAME = 0x09
    MIDI_CHANNEL_PREFIX = 0x20
    MIDI_PORT = 0x21
    END_OF_TRACK = 0x2F
    SET_TEMPO = 0x51
    SMPTE_OFFSET = 0x54
    TIME_SIGNATURE = 0x58
    KEY_SIGNATURE = 0x59
    SEQUENCER_SPECIFIC = 0x7F
    UNKNOWN = -1


class Key(enum.IntEnum):
    MAJOR = 0
    MINOR = 1


@dataclass(frozen=True)
class MetaEvent(Event):
    """Base class for meta events: FF <type> <length> <payload>

    min_length is the smallest declared length a fixed-width event accepts. None means the payload is
    kept whole, whatever its length."""
    event_type = EventType.META_EVENT
    meta_type: typing.ClassVar[MetaEventType]
    min_length: typing.ClassVar[int | None] = None

    @property
    def status_byte(self) -> int:
        return 0xFF

    @property
    def meta_msg_type(self) -> int:
        """The sub-type byte that follows 0xFF"""
        return self.meta_type.value

    @property
    @abstractmethod
    def payload(self) -> bytes:
        raise NotImplementedError

    def get_data(self) -> bytes:
        payload = self.payload
        return bytes([0xFF, self.meta_msg_type]) + encode_vlv(len(payload)) + payload

    @classmethod
    @abstractmethod
    def from_payload(cls, data: bytes) -> MetaEvent:
        """Builds the event from its payload, which is exactly min_length bytes for fixed-width events"""
        raise NotImplementedError


@dataclass(frozen=True)
class MetaEventSequenceNumber(MetaEvent):
    """Meta event for sequence number"""
    meta_type = MetaEventType.SEQUENCE_NUMBER
    min_length = 2

    ssss: int

    def __post_init__(self):
        check_range("Sequence number", self.ssss, 0, 0xFFFF)

    @property
    def payload(self) -> bytes:
        return self.ssss.to_bytes(2, 'big')

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventSequenceNumber:
        return cls(int.from_bytes(data, 'big'))


@dataclass(frozen=True)
class TextMetaEvent(MetaEvent):
    """Shared base of the free-text meta events. The raw bytes are kept so that re-encoding is lossless."""

    data: bytes

    @property
    def text(self) -> str:
        return self.data.decode(config.TEXT_ENCODING, errors='replace')

    @property
    def payload(self) -> bytes:
        return self.data

    @classmethod
    def from_payload(cls, data: bytes):
        return cls(data)

    @classmethod
    def from_text(cls, text: str):
        return cls(text.encode(config.TEXT_ENCODING))


@dataclass(frozen=True)
class MetaEventText(TextMetaEvent):
    """Meta event for text"""
    meta_type = MetaEventType.TEXT_EVENT


@dataclass(frozen=True)
class MetaEventCopyright(TextMetaEvent):
    """Meta event for copyright"""
    meta_type = MetaEventType.COPYRIGHT_NOTICE


@dataclass(frozen=True)
class MetaEventTrackName(TextMetaEvent):
    """Meta event for track name"""
    meta_type = MetaEventType.TRACK_NAME


@dataclass(frozen=True)
class MetaEventInstrumentName(TextMetaEvent):
    """Meta event for instrument name"""
    meta_type = MetaEventType.INSTRUMENT_NAME


@dataclass(frozen=True)
class MetaEventLyric(TextMetaEvent):
    """Meta event for lyric"""
    meta_type = MetaEventType.LYRIC


@dataclass(frozen=True)
class MetaEventMarker(TextMetaEvent):
    """Meta event for marker"""
    meta_type = MetaEventType.MARKER


@dataclass(frozen=True)
class MetaEventCuePoint(TextMetaEvent):
    """Meta event for cue point"""
    meta_type = MetaEventType.CUE_POINT


@dataclass(frozen=True)
class MetaEventProgramName(TextMetaEvent):
    """Meta event for program name"""
    meta_type = MetaEventType.PROGRAM_NAME


@dataclass(frozen=True)
class MetaEventDeviceName(TextMetaEvent):
    """Meta event for device name"""
    meta_type = MetaEventType.DEVICE_NAME


@dataclass(frozen=True)
class MetaEventMIDIChannelPrefix(MetaEvent):
    """Meta event for MIDI channel prefix"""
    meta_type = MetaEventType.MIDI_CHANNEL_PREFIX
    min_length = 1

    channel: int

    def __post_init__(self):
        check_range("Channel", self.channel, 0, 0xFF)

    @property
    def payload(self) -> bytes:
        return bytes([self.channel])

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventMIDIChannelPrefix:
        return cls(data[0])


@dataclass(frozen=True)
class MetaEventMIDIPort(MetaEvent):
    """Meta event for MIDI port"""
    meta_type = MetaEventType.MIDI_PORT
    min_length = 1

    port: int

    def __post_init__(self):
        check_range("Port", self.port, 0, 0xFF)

    @property
    def payload(self) -> bytes:
        return bytes([self.port])

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventMIDIPort:
        return cls(data[0])


@dataclass(frozen=True)
class MetaEventEndOfTrack(MetaEvent):
    """Meta event for end of track"""
    meta_type = MetaEventType.END_OF_TRACK
    min_length = 0

    @property
    def payload(self) -> bytes:
        return b''

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventEndOfTrack:
        return cls()


@dataclass(frozen=True)
class MetaEventSetTempo(MetaEvent):
    """Meta event for set tempo, in microseconds per quarter note"""
    meta_type = MetaEventType.SET_TEMPO
    min_length = 3

    tttttt: int

    def __post_init__(self):
        check_range("Tempo", self.tttttt, 0, 0xFFFFFF)

    @property
    def payload(self) -> bytes:
        return self.tttttt.to_bytes(3, 'big')

    @property
    def bpm(self) -> float:
        if self.tttttt == 0:
            return math.inf
        return 60_000_000 / self.tttttt

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventSetTempo:
        return cls(int.from_bytes(data, 'big'))


@dataclass(frozen=True)
class MetaEventSMPTEOffset(MetaEvent):
    """Meta event for SMPTE offset"""
    meta_type = MetaEventType.SMPTE_OFFSET
    min_length = 5

    hr: int
    mn: int
    se: int
    fr: int
    ff: int

    def __post_init__(self):
        for name in ("hr", "mn", "se", "fr", "ff"):
            check_range(name, getattr(self, name), 0, 0xFF)

    @property
    def payload(self) -> bytes:
        return bytes([self.hr, self.mn, self.se, self.fr, self.ff])

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventSMPTEOffset:
        return cls(data[0], data[1], data[2], data[3], data[4])


@dataclass(frozen=True)
class MetaEventTimeSignature(MetaEvent):
    """Meta event for time signature

    nn/2**dd is the signature, cc the MIDI clocks per metronome click, bb the notated 32nd notes per quarter note"""
    meta_type = MetaEventType.TIME_SIGNATURE
    min_length = 4

    nn: int
    dd: int
    cc: int
    bb: int

    def __post_init__(self):
        for name in ("nn", "dd", "cc", "bb"):
            check_range(name, getattr(self, name), 0, 0xFF)

    @property
    def payload(self) -> bytes:
        return bytes([self.nn, self.dd, self.cc, self.bb])

    @property
    def denominator(self) -> int:
        return 2 ** self.dd

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventTimeSignature:
        return cls(data[0], data[1], data[2], data[3])


@dataclass(frozen=True)
class MetaEventKeySignature(MetaEvent):
    """Meta event for key signature. sf counts sharps when positive and flats when negative."""
    meta_type = MetaEventType.KEY_SIGNATURE
    min_length = 2

    sf: int
    mi: Key

    def __post_init__(self):
        check_range("Sharps/flats", self.sf, -128, 127)
        if self.mi not in (Key.MAJOR, Key.MINOR):
            raise KeySignatureUnknownKeyError(self.mi)
        object.__setattr__(self, "mi", Key(self.mi))

    @property
    def payload(self) -> bytes:
        return bytes([self.sf & 0xFF, self.mi])

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventKeySignature:
        sf = data[0] - 0x100 if data[0] >= 0x80 else data[0]
        return cls(sf, data[1])

    def to_string(self) -> str:
        """Returns the key signature as a string"""
        lof_idx = (self.sf + 1) // 7
        if lof_idx > 0:
            lof = "#" * lof_idx
        elif lof_idx < 0:
            lof = "b" * -lof_idx
        else:
            lof = ""
        key = "FCGDAEB"[(self.sf + 1) % 7]
        mode = "minor" if self.mi == Key.MINOR else "major"
        return f"{key}{lof} {mode}"


@dataclass(frozen=True)
class MetaEventSequencerSpecific(MetaEvent):
    """Meta event for sequencer specific"""
    meta_type = MetaEventType.SEQUENCER_SPECIFIC

    data: bytes

    @property
    def payload(self) -> bytes:
        return self.data

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventSequencerSpecific:
        return cls(data)


@dataclass(frozen=True)
class MetaEventUnknown(MetaEvent):
    """Any meta event whose type byte is not recognized. The payload is kept as is."""
    meta_type = MetaEventType.UNKNOWN

    type_byte: int
    data: bytes

    def __post_init__(self):
        check_range("Meta type", self.type_byte, 0, 0xFF)

    @property
    def meta_msg_type(self) -> int:
        return self.type_byte

    @property
    def payload(self) -> bytes:
        return self.data

    @classmethod
    def from_payload(cls, data: bytes) -> MetaEventUnknown:
        raise TypeError("Unknown meta events need their type byte, construct them directly")


_META_EVENT_CLASSES: dict[int, type[MetaEvent]] = {
    cls.meta_type.value: cls for cls in (
        MetaEventSequenceNumber,
        MetaEventText,
        MetaEventCopyright,
        MetaEventTrackName,
        MetaEventInstrumentName,
        MetaEventLyric,
        MetaEventMarker,
        MetaEventCuePoint,
        MetaEventProgramName,
        MetaEventDeviceName,
        MetaEventMIDIChannelPrefix,
        MetaEventMIDIPort,
        MetaEventEndOfTrack,
        MetaEventSetTempo,
        MetaEventSMPTEOffset,
        MetaEventTimeSignature,
        MetaEventKeySignature,
        MetaEventSequencerSpecific,
    )
}


def read_meta_event(infile: typing.BinaryIO, meta_msg_type: int) -> MetaEvent:
    """Reads the length and payload of a meta event whose FF and type byte have been consumed

    Fixed-width events must declare at least their minimum length. Anything declared past it is skipped."""
    length = decode_vlv(infile)
    cls = _META_EVENT_CLASSES.get(meta_msg_type)
    if cls is None:
        return MetaEventUnknown(meta_msg_type, read_bytes(infile, length))
    if cls.min_length is None:
        return cls.from_payload(read_bytes(infile, length))
    if length < cls.min_length:
        raise UnexpectedMetaEventLengthError(length, meta_msg_type)
    data = read_bytes(infile, cls.min_length)
    skip_bytes(infile, length - cls.min_length)
    return cls.from_payload(data)
