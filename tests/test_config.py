"""
Tests for namespace/key resolution, store construction from CLI flags and
the process entry point.
"""

import pytest

from kubectl_htpasswd import cli, store, utils
from kubectl_htpasswd.__main__ import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("HTPASSWD_NAMESPACE", raising=False)
    monkeypatch.delenv("HTPASSWD_KEY", raising=False)


def parse(*argv):
    return cli.build_parser().parse_args(list(argv))


class TestResolveNamespace:
    def test_flag_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("HTPASSWD_NAMESPACE", "from-env")
        assert utils.resolve_namespace("from-flag") == "from-flag"

    def test_env_used_without_flag(self, monkeypatch):
        monkeypatch.setenv("HTPASSWD_NAMESPACE", "from-env")
        assert utils.resolve_namespace(None) == "from-env"

    def test_none_defers_to_context(self):
        assert utils.resolve_namespace(None) is None

    def test_empty_env_defers_to_context(self, monkeypatch):
        monkeypatch.setenv("HTPASSWD_NAMESPACE", "")
        assert utils.resolve_namespace(None) is None


class TestResolveKeyName:
    def test_default(self):
        assert utils.resolve_key_name(None) == "auth"

    def test_env(self, monkeypatch):
        monkeypatch.setenv("HTPASSWD_KEY", "users")
        assert utils.resolve_key_name(None) == "users"
        assert utils.resolve_key_name("other") == "other"


class TestOpenStore:
    @pytest.fixture
    def calls(self, monkeypatch):
        calls = []

        def fake_store(namespace=None, kubeconfig=None, context=None):
            calls.append({"namespace": namespace, "kubeconfig": kubeconfig, "context": context})
            return "store"

        monkeypatch.setattr(store, "SecretStore", fake_store)
        return calls

    def test_passes_flags_through(self, calls):
        args = parse("-n", "web", "--kubeconfig", "/kc", "--context", "prod", "list", "basic-auth")
        assert cli.open_store(args) == "store"
        assert calls == [{"namespace": "web", "kubeconfig": "/kc", "context": "prod"}]

    def test_env_namespace(self, calls, monkeypatch):
        monkeypatch.setenv("HTPASSWD_NAMESPACE", "from-env")
        cli.open_store(parse("list", "basic-auth"))
        assert calls == [{"namespace": "from-env", "kubeconfig": None, "context": None}]

    def test_no_namespace_left_to_context(self, calls):
        cli.open_store(parse("--context", "dev", "list", "basic-auth"))
        assert calls == [{"namespace": None, "kubeconfig": None, "context": "dev"}]

    def test_remote_error_becomes_exit(self, monkeypatch):
        def broken(**kwargs):
            raise store.RemoteAccessError("Unable to load kubeconfig: no config")

        monkeypatch.setattr(store, "SecretStore", broken)
        with pytest.raises(SystemExit, match="Unable to load kubeconfig"):
            cli.open_store(parse("list", "basic-auth"))


class TestMain:
    @pytest.fixture
    def handler(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["kubectl-htpasswd", "list", "basic-auth"])

        def set_handler(exc):
            def cmd(args):
                raise exc
            monkeypatch.setattr(cli, "cmd_list", cmd)

        return set_handler

    def test_keyboard_interrupt(self, handler, capsys):
        handler(KeyboardInterrupt())
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert "Aborted by user." in capsys.readouterr().out

    def test_closed_stdin(self, handler, capsys):
        handler(EOFError())
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert "No input available." in capsys.readouterr().out

    def test_runs_handler(self, monkeypatch):
        seen = []
        monkeypatch.setattr("sys.argv", ["kubectl-htpasswd", "delete", "basic-auth", "bob"])
        monkeypatch.setattr(cli, "cmd_delete", lambda args: seen.append((args.secret, args.username)))
        main()
        assert seen == [("basic-auth", "bob")]
