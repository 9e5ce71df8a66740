from typing import Optional


class CatsFormatError(Exception):
    """
    Base class for all exceptions signalling that the archive data does not match the expected CATS format.

    These are only ever raised while an archive is being opened. Once a `CatsArchive` has been constructed, its
    structure is known to be valid.
    """


class CatsOutOfDataError(CatsFormatError):
    position: int
    expected_length: int
    actual_length: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_length: int, actual_length: int, meaning: Optional[str]):
        self.position = position
        self.expected_length = expected_length
        self.actual_length = actual_length
        self.meaning = meaning

        super().__init__(
            f"Archive data ends prematurely{f' while reading {meaning}' if meaning is not None else ''}: "
            f"needed {expected_length} bytes at offset {position}, {actual_length} available"
        )


class CatsNonASCIIStringError(CatsFormatError):
    position: int
    raw_value: bytes
    meaning: Optional[str]

    def __init__(self, position: int, raw_value: bytes, meaning: Optional[str]):
        self.position = position
        self.raw_value = raw_value
        self.meaning = meaning

        super().__init__(
            f"At position {position}, {meaning or 'string'} contains non-ASCII characters: {raw_value!r}"
        )


class CatsBadMagicError(CatsFormatError):
    expected_magic: bytes
    found_magic: bytes

    def __init__(self, expected_magic: bytes, found_magic: bytes):
        self.expected_magic = expected_magic
        self.found_magic = found_magic

        super().__init__(
            f"Not a CATS archive: expected magic 0x{expected_magic.hex()}, but found 0x{found_magic.hex()}"
        )


class CatsUnsupportedVersionError(CatsFormatError):
    version: int

    def __init__(self, version: int, supported_version: int):
        self.version = version

        super().__init__(f"Unsupported CATS version {version} (only version {supported_version} can be read)")


class CatsUnknownEntryTypeError(CatsFormatError):
    path: str
    type_tag: int

    def __init__(self, path: str, type_tag: int):
        self.path = path
        self.type_tag = type_tag

        super().__init__(f"Unknown entry type 0x{type_tag:02x} for entry '{path}'")


class CatsUnknownCodecError(CatsFormatError):
    key: int
    path: Optional[str]

    def __init__(self, key: int, path: Optional[str] = None):
        self.key = key
        self.path = path

        super().__init__(
            f"Unknown compression method 0x{key:02x}{f' for entry {path!r}' if path is not None else ''}"
        )


class CatsInvalidNameError(CatsFormatError):
    parent_path: str
    name: str

    def __init__(self, parent_path: str, name: str):
        self.parent_path = parent_path
        self.name = name

        super().__init__(f"Invalid entry name {name!r} in directory '{parent_path}'")


class CatsCorruptEntryError(CatsFormatError):
    path: str
    reason: str

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason

        super().__init__(f"File entry '{path}' is corrupt: {reason}")


class CatsUnsafePathError(ValueError):
    """
    Raised when extracting an entry whose path would resolve outside of the destination directory.
    """

    path: str

    def __init__(self, path: str):
        self.path = path

        super().__init__(f"Refusing to extract '{path}': it would be written outside of the destination directory")
