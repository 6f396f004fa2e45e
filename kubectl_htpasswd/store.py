import base64
import json

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException

SECRET_TYPE_OPAQUE = "Opaque"
DEFAULT_NAMESPACE = "default"


class RemoteError(Exception):
    pass


class RemoteNotFound(RemoteError):
    pass


class RemoteAccessError(RemoteError):
    pass


def _api_message(e: ApiException) -> str:
    # The API server puts a human readable Status.message in the body
    try:
        body = json.loads(e.body or "")
    except (TypeError, ValueError):
        body = None
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return f"{e.status} {e.reason}"


def context_namespace(kubeconfig: str | None, context: str | None) -> str:
    try:
        contexts, current = config.list_kube_config_contexts(config_file=kubeconfig)
    except (ConfigException, OSError) as e:
        raise RemoteAccessError(f"Unable to load kubeconfig: {e}")
    if context:
        matches = [c for c in contexts if c.get("name") == context]
        if not matches:
            raise RemoteAccessError(f"Context {context!r} not found in kubeconfig")
        current = matches[0]
    if not current:
        raise RemoteAccessError("missing context")
    return (current.get("context") or {}).get("namespace") or DEFAULT_NAMESPACE


def connect(kubeconfig: str | None = None, context: str | None = None) -> client.CoreV1Api:
    try:
        api_client = config.new_client_from_config(config_file=kubeconfig, context=context)
    except (ConfigException, OSError) as e:
        raise RemoteAccessError(f"Unable to load kubeconfig: {e}")
    return client.CoreV1Api(api_client)


class SecretStore:
    """Reads and writes one Kubernetes Secret holding the credential file."""

    def __init__(self, namespace: str | None = None, kubeconfig: str | None = None,
                 context: str | None = None, api: client.CoreV1Api | None = None):
        if namespace is None:
            namespace = context_namespace(kubeconfig, context)
        self.namespace = namespace
        self.api = api if api is not None else connect(kubeconfig, context)

    def get(self, name: str) -> client.V1Secret:
        try:
            return self.api.read_namespaced_secret(name, self.namespace)
        except ApiException as e:
            if e.status == 404:
                raise RemoteNotFound(f"Secret {name!r} not found in namespace {self.namespace!r}")
            raise RemoteAccessError(f"Error getting secret {name!r}: {_api_message(e)}")

    def new(self, name: str) -> client.V1Secret:
        return client.V1Secret(
            metadata=client.V1ObjectMeta(name=name, namespace=self.namespace),
            type=SECRET_TYPE_OPAQUE,
            data={},
        )

    def create(self, secret: client.V1Secret) -> client.V1Secret:
        try:
            return self.api.create_namespaced_secret(self.namespace, secret)
        except ApiException as e:
            if e.status == 409:
                raise RemoteAccessError(f"Secret {secret.metadata.name!r} already exists")
            raise RemoteAccessError(f"Error creating secret {secret.metadata.name!r}: {_api_message(e)}")

    def update(self, secret: client.V1Secret) -> client.V1Secret:
        try:
            return self.api.replace_namespaced_secret(secret.metadata.name, self.namespace, secret)
        except ApiException as e:
            if e.status == 404:
                raise RemoteNotFound(f"Secret {secret.metadata.name!r} not found in namespace {self.namespace!r}")
            raise RemoteAccessError(f"Error updating secret {secret.metadata.name!r}: {_api_message(e)}")


def read_key(secret: client.V1Secret, key: str) -> bytes:
    if secret.type != SECRET_TYPE_OPAQUE:
        raise RemoteAccessError("invalid secret type")
    data = secret.data or {}
    if key not in data:
        raise RemoteAccessError(f"Secret with key {key!r} does not exist")
    return base64.b64decode(data[key] or "")


def write_key(secret: client.V1Secret, key: str, value: bytes):
    if secret.data is None:
        secret.data = {}
    secret.data[key] = base64.b64encode(value).decode("ascii")
