from __future__ import annotations

import pytest
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

import app
from config import load_config

from fakes import FakeCluster, FakeManagement, ns


@pytest.fixture
def cluster(monkeypatch):
    mgmt = FakeManagement()
    cl = FakeCluster()
    monkeypatch.setattr(app, "connect", lambda kubeconfig=None: (mgmt, cl))
    monkeypatch.delenv("NAMESPACE", raising=False)
    return cl


def test_parse_args_defaults(monkeypatch) -> None:
    monkeypatch.setenv("KUBECONFIG", "/tmp/kc")
    args = app.parse_args([])
    assert args.kubeconfig == "/tmp/kc"
    assert args.namespace is None
    assert args.dry_run is False
    assert args.output == "text"


def test_load_config_priority(monkeypatch) -> None:
    monkeypatch.delenv("NAMESPACE", raising=False)
    assert load_config().namespace == "cattle-system"
    monkeypatch.setenv("NAMESPACE", "from-env")
    assert load_config().namespace == "from-env"
    assert load_config("from-flag").namespace == "from-flag"


def test_main_success(cluster, capsys) -> None:
    cluster.add("namespace", ns("cattle-system"))
    assert app.main([]) == 0
    out = capsys.readouterr().out
    assert "removing rancher deployment namespace [cattle-system]" in out
    assert cluster.names("namespace") == []


def test_main_dry_run_touches_nothing(cluster, capsys) -> None:
    cluster.add("namespace", ns("rancher"))
    assert app.main(["--dry-run", "-n", "rancher"]) == 0
    assert "[plan] namespace=rancher" in capsys.readouterr().out
    assert cluster.names("namespace") == ["rancher"]


def test_main_failure_exit_code(cluster, capsys) -> None:
    cluster.add("namespace", ns("cattle-system"))
    cluster.fail_delete.add(("namespace", "cattle-system"))
    assert app.main([]) == 1
    assert "teardown failed" in capsys.readouterr().err


def test_main_list_error_exit_code(monkeypatch, capsys) -> None:
    class Broken(FakeManagement):
        def list(self, kind, namespace=None, label_selector=None):
            raise ApiException(status=401, reason="Unauthorized")

    monkeypatch.setattr(app, "connect", lambda kubeconfig=None: (Broken(), FakeCluster()))
    assert app.main([]) == 1
    assert "Unauthorized" in capsys.readouterr().err


def test_load_config_env_overrides(monkeypatch) -> None:
    monkeypatch.delenv("RMRANCHER_SKIP_SANITIZE", raising=False)
    monkeypatch.delenv("RMRANCHER_LABEL_SELECTOR", raising=False)
    cfg = load_config()
    assert cfg.skip_sanitize is False
    assert cfg.label_selector == "cattle.io/creator=norman"

    monkeypatch.setenv("RMRANCHER_SKIP_SANITIZE", "1")
    monkeypatch.setenv("RMRANCHER_LABEL_SELECTOR", "app=rancher")
    cfg = load_config()
    assert cfg.skip_sanitize is True
    assert cfg.label_selector == "app=rancher"


def test_main_interrupted(monkeypatch, capsys) -> None:
    def _interrupt(kubeconfig=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(app, "connect", _interrupt)
    assert app.main([]) == 130
    assert "[rmrancher] interrupted" in capsys.readouterr().err


def test_main_unreachable_api_server(monkeypatch, capsys) -> None:
    def _unreachable(kubeconfig=None):
        raise HTTPError("connection refused")

    monkeypatch.setattr(app, "connect", _unreachable)
    assert app.main([]) == 1
    err = capsys.readouterr().err
    assert "[rmrancher] teardown failed: connection refused" in err
