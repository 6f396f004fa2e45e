import base64
from getpass import getpass
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend

SHA_PREFIX = "{SHA}"
BACKEND = default_backend()


class PasswordMismatch(Exception):
    pass


def sha1_digest(data: bytes) -> bytes:
    h = hashes.Hash(hashes.SHA1(), backend=BACKEND)
    h.update(data)
    return h.finalize()


def sha_credential(password: str) -> str:
    # Legacy htpasswd {SHA} scheme: unsalted SHA-1, standard base64 with padding.
    digest = sha1_digest(password.encode("utf-8"))
    return SHA_PREFIX + base64.b64encode(digest).decode("ascii")


def read_new_password() -> str:
    pw1 = getpass("Enter password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise PasswordMismatch("Passwords don't match.")
    return pw1


def read_password() -> str:
    return getpass("Password: ")
