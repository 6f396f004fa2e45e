import argparse

from . import __prog__, __version__
from . import crypto
from . import store
from . import utils
from .htpasswd import HtpasswdError, PasswordFile, validate_username


def open_store(args) -> store.SecretStore:
    try:
        return store.SecretStore(namespace=utils.resolve_namespace(args.namespace),
                                 kubeconfig=args.kubeconfig,
                                 context=args.context)
    except store.RemoteError as e:
        raise SystemExit(str(e))


def load_password_file(st: store.SecretStore, name: str, key: str, create: bool = False):
    try:
        if create:
            return st.new(name), PasswordFile()
        secret = st.get(name)
        return secret, PasswordFile.from_bytes(store.read_key(secret, key))
    except (store.RemoteError, HtpasswdError) as e:
        raise SystemExit(str(e))


def save_password_file(st: store.SecretStore, secret, key: str, htpasswd: PasswordFile, create: bool = False):
    store.write_key(secret, key, htpasswd.to_bytes())
    try:
        if create:
            st.create(secret)
        else:
            st.update(secret)
    except store.RemoteError as e:
        raise SystemExit(str(e))


def cmd_list(args):
    st = open_store(args)
    _, htpasswd = load_password_file(st, args.secret, utils.resolve_key_name(args.key_name))
    print("Existing users:")
    for username in htpasswd.list_users():
        print(username)


def cmd_set(args):
    key = utils.resolve_key_name(args.key_name)
    st = open_store(args)
    secret, htpasswd = load_password_file(st, args.secret, key, create=args.create)

    try:
        validate_username(args.username)
        password = crypto.read_new_password()
        existed = htpasswd.set_password(args.username, password)
    except (crypto.PasswordMismatch, HtpasswdError) as e:
        raise SystemExit(str(e))

    save_password_file(st, secret, key, htpasswd, create=args.create)
    if existed:
        print("Password updated successfully.")
    else:
        print(f"User {args.username} added.")


def cmd_delete(args):
    key = utils.resolve_key_name(args.key_name)
    st = open_store(args)
    secret, htpasswd = load_password_file(st, args.secret, key)
    try:
        htpasswd.delete_user(args.username)
    except HtpasswdError as e:
        raise SystemExit(str(e))
    save_password_file(st, secret, key, htpasswd)
    print(f"User {args.username} deleted.")


def cmd_verify(args):
    st = open_store(args)
    _, htpasswd = load_password_file(st, args.secret, utils.resolve_key_name(args.key_name))
    try:
        ok = htpasswd.verify_password(args.username, crypto.read_password())
    except HtpasswdError as e:
        raise SystemExit(str(e))
    if not ok:
        raise SystemExit("Password verification failed.")
    print("ok")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=__prog__,
                                     description="Create or edit a htpasswd secret")
    parser.add_argument("--version", action="version", version=f"{__prog__} v{__version__}")
    parser.add_argument("-n", "--namespace",
                        help="Namespace of the secret (or set HTPASSWD_NAMESPACE). Default: namespace of the current context")
    parser.add_argument("--context", help="Name of the kubeconfig context to use")
    parser.add_argument("--kubeconfig", help="Path to the kubeconfig file (or set KUBECONFIG)")
    parser.add_argument("--key-name",
                        help=f"Secret key holding the htpasswd file (or set HTPASSWD_KEY). Default: {utils.DEFAULT_KEY_NAME}")
    sub = parser.add_subparsers(dest="command", required=True)

    # list
    s = sub.add_parser("list", help="List users")
    s.add_argument("secret")
    s.set_defaults(func=cmd_list)

    # set
    s = sub.add_parser("set", help="Add a user or change its password")
    s.add_argument("secret")
    s.add_argument("username")
    s.add_argument("-c", "--create", action="store_true", help="Create a new secret")
    s.set_defaults(func=cmd_set)

    # delete
    s = sub.add_parser("delete", help="Delete the specified user")
    s.add_argument("secret")
    s.add_argument("username")
    s.set_defaults(func=cmd_delete)

    # verify
    s = sub.add_parser("verify", help="Check a user's password")
    s.add_argument("secret")
    s.add_argument("username")
    s.set_defaults(func=cmd_verify)

    return parser
