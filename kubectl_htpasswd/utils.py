import os

DEFAULT_KEY_NAME = "auth"


def resolve_namespace(cli_namespace: str | None) -> str | None:
    # None means "use the namespace of the current kube context"
    if cli_namespace: return cli_namespace
    return os.getenv("HTPASSWD_NAMESPACE") or None


def resolve_key_name(cli_key: str | None) -> str:
    if cli_key: return cli_key
    env = os.getenv("HTPASSWD_KEY")
    return env if env else DEFAULT_KEY_NAME
