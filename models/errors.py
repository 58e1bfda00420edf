"""Codec error taxonomy."""


class CodecError(Exception):
    """Base class for all codec failures."""


class ContractError(CodecError, ValueError):
    """Caller broke an operation's precondition (channel count, block size, shape)."""


class FormatError(CodecError):
    """Container bytes are structurally invalid."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class EntropyError(CodecError):
    """Lossless byte compressor failed."""
