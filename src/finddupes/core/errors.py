"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception types raised by the duplicate detection core.
"""


class FinddupesError(RuntimeError):
    """Base class for all errors raised by the core."""


class SignatureError(FinddupesError):
    """A file could not be read at the requested refinement level."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class IndexInsertionError(FinddupesError):
    """A record could not be added to the candidate index."""


class SignatureCollisionError(FinddupesError):
    """A refined signature matched a key already owned by an unrelated bucket."""

    def __init__(self, signature: str):
        self.signature = signature
        super().__init__(f"Signature collision on key {signature}")
