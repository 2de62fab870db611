# Implements the MIDI channel voice messages
from __future__ import annotations
import enum
import typing
from abc import abstractmethod
from dataclasses import dataclass
from .base import Event, EventType, check_range
from .exceptions import UnknownEventError


class MessageType(enum.IntEnum):
    """MIDI channel voice message types, keyed by the high nibble of the status byte"""

    NOTE_OFF = 0x80
    NOTE_ON = 0x90
    POLY_PRESSURE = 0xA0
    CONTROL_CHANGE = 0xB0
    PROGRAM_CHANGE = 0xC0
    CHANNEL_PRESSURE = 0xD0
    PITCH_BEND = 0xE0

    @property
    def size(self) -> int:
        """Number of bytes including the status byte"""
        if self in (MessageType.PROGRAM_CHANGE, MessageType.CHANNEL_PRESSURE):
            return 2
        return 3


def lookup_message_type(status_byte: int) -> MessageType:
    """Looks up the channel voice message type for a given status byte."""
    assert 0 <= status_byte <= 0xFF, f"Status byte {status_byte} is out of range."
    if not 0x80 <= status_byte < 0xF0:
        raise UnknownEventError(status_byte)
    return MessageType(status_byte & 0xF0)


@dataclass(frozen=True)
class MidiMessage(Event):
    """Base class for MIDI channel voice messages"""
    event_type = EventType.MIDI_EVENT
    message_type: typing.ClassVar[MessageType]

    channel: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Channel", self.channel, 0, 15)

    @property
    def status_byte(self) -> int:
        return self.message_type | self.channel

    @property
    @abstractmethod
    def data_bytes(self) -> bytes:
        """The data bytes that follow the status byte"""
        raise NotImplementedError

    def get_data(self) -> bytes:
        """Returns the underlying data as bytes"""
        return bytes([self.status_byte]) + self.data_bytes

    @staticmethod
    def from_bytes(bs: typing.Sequence[int]) -> MidiMessage:
        """Creates a MidiMessage from a status byte followed by its data bytes"""
        if len(bs) == 0:
            raise ValueError("Empty byte list")

        status_byte = bs[0]
        msgtp = lookup_message_type(status_byte)
        if len(bs) != msgtp.size:
            raise ValueError(f"Byte list length {len(bs)} (from {msgtp.name}) does not match expected length {msgtp.size}: {list(bs)}")

        channel = status_byte & 0x0F
        if msgtp == MessageType.NOTE_ON:
            return NoteOnMessage(channel, note=bs[1], velocity=bs[2])
        if msgtp == MessageType.NOTE_OFF:
            return NoteOffMessage(channel, note=bs[1], velocity=bs[2])
        if msgtp == MessageType.CONTROL_CHANGE:
            return ControlChangeMessage(channel, controller=bs[1], value=bs[2])
        if msgtp == MessageType.PROGRAM_CHANGE:
            return ProgramChangeMessage(channel, program=bs[1])
        if msgtp == MessageType.PITCH_BEND:
            # The byte read second is the high byte
            return PitchBendMessage(channel, value=bs[1] | (bs[2] << 8))
        if msgtp == MessageType.CHANNEL_PRESSURE:
            return ChannelPressureMessage(channel, pressure=bs[1])
        return PolyPressureMessage(channel, note=bs[1], pressure=bs[2])


@dataclass(frozen=True)
class NoteOnMessage(MidiMessage):
    """Note On message class"""
    message_type = MessageType.NOTE_ON

    note: int
    velocity: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Note", self.note, 0, 127)
        check_range("Velocity", self.velocity, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.note, self.velocity])

    @property
    def is_note_off(self) -> bool:
        """Returns True if this should instruct an instrument to stop playing"""
        return self.velocity == 0


@dataclass(frozen=True)
class NoteOffMessage(MidiMessage):
    """Note Off message class"""
    message_type = MessageType.NOTE_OFF

    note: int
    velocity: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Note", self.note, 0, 127)
        check_range("Velocity", self.velocity, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.note, self.velocity])


@dataclass(frozen=True)
class PolyPressureMessage(MidiMessage):
    """Polyphonic key pressure message class"""
    message_type = MessageType.POLY_PRESSURE

    note: int
    pressure: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Note", self.note, 0, 127)
        check_range("Pressure", self.pressure, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.note, self.pressure])


@dataclass(frozen=True)
class ControlChangeMessage(MidiMessage):
    """Control Change message class"""
    message_type = MessageType.CONTROL_CHANGE

    controller: int
    value: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Controller", self.controller, 0, 127)
        check_range("Value", self.value, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.controller, self.value])


@dataclass(frozen=True)
class ProgramChangeMessage(MidiMessage):
    """Program Change message class"""
    message_type = MessageType.PROGRAM_CHANGE

    program: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Program", self.program, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.program])


@dataclass(frozen=True)
class ChannelPressureMessage(MidiMessage):
    """Channel Pressure message class"""
    message_type = MessageType.CHANNEL_PRESSURE

    pressure: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Pressure", self.pressure, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.pressure])


@dataclass(frozen=True)
class PitchBendMessage(MidiMessage):
    """Pitch Bend message class

    value is (second data byte << 8) | first data byte, as read off the wire"""
    message_type = MessageType.PITCH_BEND

    value: int

    def __post_init__(self):
        super().__post_init__()
        check_range("Value", self.value, 0, 0x7F7F)
        check_range("Low byte of value", self.value & 0xFF, 0, 127)

    @property
    def data_bytes(self) -> bytes:
        return bytes([self.value & 0xFF, self.value >> 8])

    @property
    def bend(self) -> int:
        """The 14-bit bend amount centered on zero, in the range [-8192, 8191]"""
        return (((self.value >> 8) << 7) | (self.value & 0x7F)) - 8192
