"""Tests for kubeconfig metadata resolution and ClusterInfo display rules."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from k8sintellect.cluster.connection import (
    cluster_info_from_kubeconfig,
    kubeconfig_path,
    read_kubeconfig_info,
)
from k8sintellect.models.cluster import ClusterInfo

_KUBECONFIG = {
    "apiVersion": "v1",
    "kind": "Config",
    "current-context": "dev",
    "contexts": [
        {"name": "dev", "context": {"cluster": "kind-dev", "user": "dev-admin"}},
        {"name": "prod", "context": {"cluster": "eks-prod", "user": "prod-admin"}},
    ],
    "clusters": [
        {"name": "kind-dev", "cluster": {"server": "https://127.0.0.1:6443"}},
        {"name": "eks-prod", "cluster": {"server": "https://prod.example.com"}},
    ],
}


class TestClusterInfoFromKubeconfig:
    def test_current_context(self) -> None:
        info = cluster_info_from_kubeconfig(_KUBECONFIG)
        assert info == ClusterInfo(name="kind-dev", context="dev", server="https://127.0.0.1:6443")

    def test_explicit_context(self) -> None:
        info = cluster_info_from_kubeconfig(_KUBECONFIG, context="prod")
        assert info.name == "eks-prod"
        assert info.server == "https://prod.example.com"

    def test_unknown_context(self) -> None:
        info = cluster_info_from_kubeconfig(_KUBECONFIG, context="staging")
        assert info == ClusterInfo(name="", context="staging", server=None)
        assert info.display_name == "staging"

    @pytest.mark.parametrize("document", [None, "text", [], {"contexts": "bad", "clusters": 3}])
    def test_malformed_document(self, document: object) -> None:
        assert cluster_info_from_kubeconfig(document).display_name == "unknown"


class TestReadKubeconfig:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text(yaml.safe_dump(_KUBECONFIG), encoding="utf-8")
        assert read_kubeconfig_info(str(path)).name == "kind-dev"

    def test_missing_file(self, tmp_path: Path) -> None:
        info = read_kubeconfig_info(str(tmp_path / "absent"), context="ctx")
        assert info == ClusterInfo(context="ctx")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("contexts: [unclosed", encoding="utf-8")
        assert read_kubeconfig_info(str(path)).display_name == "unknown"


class TestKubeconfigPath:
    def test_first_entry_of_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        first = tmp_path / "a"
        monkeypatch.setenv("KUBECONFIG", f"{first}:{tmp_path / 'b'}")
        assert kubeconfig_path() == str(first)

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KUBECONFIG", raising=False)
        assert kubeconfig_path().endswith("/.kube/config")


class TestClusterInfo:
    def test_display_name_prefers_name(self) -> None:
        assert ClusterInfo(name="prod", context="admin@prod").display_name == "prod"

    def test_display_name_falls_back_to_context(self) -> None:
        assert ClusterInfo(context="admin@prod").display_name == "admin@prod"

    def test_to_dict_fills_unknowns(self) -> None:
        assert ClusterInfo().to_dict() == {"name": "unknown", "server": None, "context": "unknown"}
