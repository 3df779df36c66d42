"""
In-memory handling of user credentials.
"""
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Union


class SecretBytes:
    """Mutable secret buffer that can be zeroed once it is no longer needed."""

    def __init__(self, value: Union[bytes, bytearray, str]):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._buffer = bytearray(value)
        self._wiped = False

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return "SecretBytes(<redacted>)"

    __str__ = __repr__

    @contextmanager
    def exposed(self) -> Iterator[bytearray]:
        """
        Yield a transient copy of the secret.

        The copy is zeroed when the block exits, whether it returns or raises.

        Raises:
            ValueError: If the secret has already been wiped
        """
        if self._wiped:
            raise ValueError("Secret has already been wiped")
        transient = bytearray(self._buffer)
        try:
            yield transient
        finally:
            _zero(transient)

    def wipe(self) -> None:
        """Overwrite the secret with zeros."""
        _zero(self._buffer)
        self._wiped = True

    def __enter__(self) -> "SecretBytes":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.wipe()
        return False


def _zero(buffer: bytearray) -> None:
    for i in range(len(buffer)):
        buffer[i] = 0


@dataclass
class Credentials:
    """User identity plus password, valid for one enrollment."""
    identity: str
    secret: SecretBytes = field(repr=False)

    def __post_init__(self):
        if not self.identity:
            raise ValueError("identity must not be empty")
        if not isinstance(self.secret, SecretBytes):
            self.secret = SecretBytes(self.secret)

    def __repr__(self) -> str:
        return f"Credentials(identity={self.identity!r}, secret=<redacted>)"

    def wipe(self) -> None:
        self.secret.wipe()
