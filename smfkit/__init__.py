# Standard MIDI File track decoding, following:
# https://midi.org/midi-1-0-core-specifications
# https://www.freqsound.com/SIRA/MIDI%20Specification.pdf

from .base import (
    ChunkType,
    Event,
    EventType,
    MidiData,
    VariableLengthInt,
    decode_vlv,
    encode_vlv,
    partial_decode_vlv,
    vlv_length,
)
from .exceptions import (
    InvalidDataError,
    KeySignatureUnknownKeyError,
    MagicMismatchError,
    MidiDecodeError,
    MidiEncodeError,
    MidiEOFError,
    NoPreviousEventError,
    NumberTooBigError,
    TrackCountMismatchError,
    UnexpectedMetaEventLengthError,
    UnknownEventError,
    VLVTooBigError,
)
from .message import (
    MessageType,
    MidiMessage,
    NoteOffMessage,
    NoteOnMessage,
    PolyPressureMessage,
    ControlChangeMessage,
    ProgramChangeMessage,
    ChannelPressureMessage,
    PitchBendMessage,
)
from .meta import (
    Key,
    MetaEvent,
    MetaEventType,
    TextMetaEvent,
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
    MetaEventUnknown,
)
from .events import SysexEvent, TrackEvent, TrackChunk, decode_event, decode_events, encode_events, read_track
from .file import HeaderChunk, Midifile, read_header_chunk
