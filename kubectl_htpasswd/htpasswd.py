import hmac
from typing import Dict, Iterator, List, Optional

from .crypto import sha_credential, SHA_PREFIX

FORBIDDEN_USERNAME_CHARS = (":", "\n", "\r")


class HtpasswdError(Exception):
    """Base class for credential file errors."""


class FormatError(HtpasswdError, ValueError):
    pass


class UnsupportedScheme(FormatError):
    pass


class UserNotFound(HtpasswdError, KeyError):
    def __init__(self, username: str):
        super().__init__(username)
        self.username = username

    def __str__(self):
        return f"user {self.username!r} does not exist"


class InvalidUsername(HtpasswdError, ValueError):
    pass


def validate_username(username: str):
    if not username:
        raise InvalidUsername("username must not be empty")
    for ch in FORBIDDEN_USERNAME_CHARS:
        if ch in username:
            raise InvalidUsername(f"username {username!r} contains forbidden character {ch!r}")
    if username != username.strip():
        raise InvalidUsername(f"username {username!r} has leading or trailing whitespace")


class PasswordFile:
    """
    In-memory view of an htpasswd-style credential file.

    The file is a list of ``username:credential`` lines. Blank lines are
    ignored when reading and never written. Output is sorted by username so
    that repeated writes of the same content produce the same bytes.
    """

    def __init__(self, passwords: Optional[Dict[str, str]] = None):
        self.passwords: Dict[str, str] = dict(passwords or {})

    @classmethod
    def from_bytes(cls, data: Optional[bytes]) -> "PasswordFile":
        if not data:
            return cls()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"credential file is not valid UTF-8: {e}") from e

        passwords: Dict[str, str] = {}
        for lineno, line in enumerate(text.split("\n"), start=1):
            line = line.strip()
            if not line:
                continue
            parts = line.split(":")
            if len(parts) != 2:
                raise FormatError(
                    f"malformed line {lineno}: expected 'username:credential', "
                    f"got {len(parts)} field(s)"
                )
            username, credential = parts[0].strip(), parts[1].strip()
            if username in passwords:
                raise FormatError(f"duplicate username {username!r} on line {lineno}")
            passwords[username] = credential
        return cls(passwords)

    def to_bytes(self) -> bytes:
        return "".join(
            f"{username}:{self.passwords[username]}\n" for username in sorted(self.passwords)
        ).encode("utf-8")

    def list_users(self) -> List[str]:
        return sorted(self.passwords)

    def set_password(self, username: str, password: str) -> bool:
        """Hash ``password`` and store it for ``username``.

        Returns True if an existing entry was overwritten.
        """
        validate_username(username)
        existed = username in self.passwords
        self.passwords[username] = sha_credential(password)
        return existed

    def delete_user(self, username: str):
        if username not in self.passwords:
            raise UserNotFound(username)
        del self.passwords[username]

    def verify_password(self, username: str, password: str) -> bool:
        if username not in self.passwords:
            raise UserNotFound(username)
        stored = self.passwords[username]
        if not stored.startswith(SHA_PREFIX):
            raise UnsupportedScheme(f"credential for {username!r} does not use the {SHA_PREFIX} scheme")
        return hmac.compare_digest(sha_credential(password).encode("ascii"), stored.encode("utf-8"))

    def __contains__(self, username) -> bool:
        return username in self.passwords

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_users())

    def __len__(self) -> int:
        return len(self.passwords)
