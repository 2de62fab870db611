class MidiDecodeError(ValueError):
    """Exception raised when decoding a MIDI file fails, which indicates either a faulty file or not a MIDI file"""
    pass


class MidiEOFError(MidiDecodeError, EOFError):
    """Special subclass of MidiDecodeError for EOF errors"""
    pass


class MidiEncodeError(ValueError):
    """Exception raised when a MIDI object cannot be turned back into bytes"""
    pass


class InvalidDataError(MidiDecodeError, MidiEncodeError):
    """A field holds a value that does not fit its slot in the wire format"""
    pass


class VLVTooBigError(MidiDecodeError):
    """A variable length integer kept going past 4 bytes"""

    def __init__(self):
        super().__init__("Trying to read a variable length integer bigger than 4 bytes")


class NumberTooBigError(MidiEncodeError):
    def __init__(self, value: int):
        self.value = value
        super().__init__(f"Value {value} is too big to fit in a variable length integer")


class MagicMismatchError(MidiDecodeError):
    def __init__(self, expected: bytes, found: bytes):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected chunk tag {expected!r}, found {found!r}")


class NoPreviousEventError(MidiDecodeError):
    """Running status was used before any status byte was seen in the track"""

    def __init__(self):
        super().__init__("Running status without a previous status byte")


class UnknownEventError(MidiDecodeError):
    def __init__(self, status_byte: int):
        self.status_byte = status_byte
        super().__init__(f"Unknown event with status byte 0x{status_byte:02X}")


class UnexpectedMetaEventLengthError(MidiDecodeError):
    def __init__(self, length: int, meta_type: int | None = None):
        self.length = length
        self.meta_type = meta_type
        where = f" for meta event 0x{meta_type:02X}" if meta_type is not None else ""
        super().__init__(f"Unexpected meta event length {length}{where}")


class KeySignatureUnknownKeyError(MidiDecodeError):
    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Key signature has unknown key {key}, expected 0 (major) or 1 (minor)")


class TrackCountMismatchError(MidiEncodeError):
    def __init__(self, declared: int, actual: int):
        self.declared = declared
        self.actual = actual
        super().__init__(f"Header declares {declared} tracks but {actual} track chunks are present")
