import io
import logging
import struct

import pytest

from smfkit import (
    MagicMismatchError,
    MetaEventEndOfTrack,
    MetaEventSetTempo,
    MetaEventText,
    MetaEventTrackName,
    MetaEventUnknown,
    NoteOffMessage,
    NoteOnMessage,
    ProgramChangeMessage,
    SysexEvent,
    TrackChunk,
    TrackEvent,
    UnknownEventError,
    read_track,
)


def chunk(body: bytes, size: int | None = None) -> bytes:
    if size is None:
        size = len(body)
    return struct.pack(">4sL", b"MTrk", size) + body


BODY = (
    b"\x00\xFF\x03\x05Piano"      # track name
    b"\x00\xFF\x51\x03\x07\xA1\x20"  # tempo
    b"\x00\xC0\x05"               # program change
    b"\x00\x90\x3C\x64"           # note on
    b"\x60\x3C\x00"               # note on, running status, velocity 0
    b"\x00\x3E\x64"               # note on, running status
    b"\x60\x80\x3E\x40"           # note off
    b"\x00\xFF\x2F\x00"           # end of track
)

EVENTS = [
    TrackEvent.create(0, MetaEventTrackName(b"Piano")),
    TrackEvent.create(0, MetaEventSetTempo(500000)),
    TrackEvent.create(0, ProgramChangeMessage(0, program=5)),
    TrackEvent.create(0, NoteOnMessage(0, note=60, velocity=100)),
    TrackEvent.create(96, NoteOnMessage(0, note=60, velocity=0)),
    TrackEvent.create(0, NoteOnMessage(0, note=62, velocity=100)),
    TrackEvent.create(96, NoteOffMessage(0, note=62, velocity=64)),
    TrackEvent.create(0, MetaEventEndOfTrack()),
]


def test_read_track() -> None:
    infile = io.BytesIO(chunk(BODY) + b"MTrk")
    track = read_track(infile)
    assert track.size == len(BODY)
    assert track.events == EVENTS
    assert track.has_end_of_track
    assert [e.time for e in track.events] == [0, 0, 0, 0, 96, 0, 96, 0]
    # Stops exactly at the end of the chunk
    assert infile.tell() == 8 + len(BODY)


def test_write_track() -> None:
    track = TrackChunk(len(BODY), EVENTS)
    assert track.get_data(use_running_status=True) == chunk(BODY)
    explicit = track.get_data()
    assert len(explicit) == len(chunk(BODY)) + 2
    assert read_track(io.BytesIO(explicit)).events == EVENTS


def test_magic_mismatch() -> None:
    data = b"MThd" + chunk(BODY)[4:]
    with pytest.raises(MagicMismatchError) as excinfo:
        read_track(io.BytesIO(data))
    assert excinfo.value.expected == b"MTrk"
    assert excinfo.value.found == b"MThd"


def test_missing_end_of_track_is_accepted(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="smfkit.events"):
        track = read_track(io.BytesIO(chunk(b"\x00\x90\x3C\x40\x10\x80\x3C\x40")))
    assert track.events == [
        TrackEvent.create(0, NoteOnMessage(0, note=60, velocity=64)),
        TrackEvent.create(16, NoteOffMessage(0, note=60, velocity=64)),
    ]
    assert not track.has_end_of_track
    assert "end of track" in caplog.text


def test_empty_track() -> None:
    track = read_track(io.BytesIO(chunk(b"")))
    assert track.events == []


def test_event_may_overrun_declared_length(caplog) -> None:
    # Declared length ends in the middle of the note on, which is still read whole
    data = chunk(b"\x00\x90\x3C\x40", size=3) + b"\x00\xFF\x2F\x00"
    infile = io.BytesIO(data)
    with caplog.at_level(logging.WARNING, logger="smfkit.events"):
        track = read_track(infile)
    assert track.size == 3
    assert track.events == [TrackEvent.create(0, NoteOnMessage(0, note=60, velocity=64))]
    assert infile.tell() == 12
    assert "overran" in caplog.text


def test_running_status_follows_meta_events() -> None:
    # The most recent status byte is FF, so the data byte 3C is read as a meta type
    body = b"\x00\x90\x3C\x40" b"\x00\xFF\x01\x00" b"\x00\x3C\x00"
    track = read_track(io.BytesIO(chunk(body)))
    assert track.events[1].event == MetaEventText(b"")
    assert track.events[2].event == MetaEventUnknown(0x3C, b"")


def test_running_status_follows_sysex() -> None:
    body = b"\x00\xF0\x01\x7F" b"\x00\x02\x01\x02"
    track = read_track(io.BytesIO(chunk(body)))
    assert [e.event for e in track.events] == [SysexEvent(0xF0, b"\x7F"), SysexEvent(0xF0, b"\x01\x02")]


def test_first_error_aborts_track() -> None:
    body = b"\x00\x90\x3C\x40" b"\x00\xF4\x00" b"\x00\xFF\x2F\x00"
    with pytest.raises(UnknownEventError) as excinfo:
        read_track(io.BytesIO(chunk(body)))
    assert excinfo.value.status_byte == 0xF4
