"""Exception types raised while reading EER and MRC files."""
from __future__ import annotations


class EmfirError(Exception):
    """Base class for all decoding failures."""


class UnsupportedFormatError(EmfirError, ValueError):
    """Compression variant or file mode outside the supported set."""


class CorruptStreamError(EmfirError, ValueError):
    """Container layout or event stream is inconsistent."""


class StripReadError(EmfirError, OSError):
    """Seek or read of a strip's bytes failed."""
