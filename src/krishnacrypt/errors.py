"""Typed errors raised by the cipher, chaining and tunnel layers.

Messages deliberately stay generic: which pad byte was wrong, or where,
never appears in an error message.
"""


class KrishnaCryptError(Exception):
    """Base class for all cipher errors."""


class DecryptionError(KrishnaCryptError):
    """A ciphertext envelope was rejected."""

    kind = "decryption_error"


class MalformedEncoding(DecryptionError):
    """Input text is not decodable to bytes."""

    kind = "malformed_encoding"


class InvalidLength(DecryptionError):
    """Decoded envelope is shorter than two blocks or not block aligned."""

    kind = "invalid_length"


class InvalidPadding(DecryptionError):
    """Recovered padding is out of range or inconsistent."""

    kind = "invalid_padding"


class InvalidPlaintext(DecryptionError):
    """Recovered plaintext bytes are not valid UTF-8."""

    kind = "invalid_plaintext"


class EntropyError(KrishnaCryptError):
    """The secure random source could not produce an IV."""

    kind = "entropy_error"
