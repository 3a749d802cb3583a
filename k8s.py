# k8s.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from kubernetes import client, config

from config import TeardownConfig

MANAGEMENT_GROUP = "management.cattle.io"
MANAGEMENT_VERSION = "v3"

# kind -> (plural, namespaced)
MANAGEMENT_KINDS: Dict[str, Tuple[str, bool]] = {
    "project": ("projects", True),
    "cluster": ("clusters", False),
    "user": ("users", False),
}

CLUSTER_KINDS = ("namespace", "secret", "clusterrole", "clusterrolebinding")


@dataclass(frozen=True)
class ManagedResource:
    kind: str
    name: str
    namespace: str = ""


def load_kube(kubeconfig: Optional[str] = None) -> None:
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        print(f"[rmrancher] using kubeconfig {kubeconfig}")
        return
    try:
        config.load_incluster_config()
        print("[rmrancher] using in-cluster config")
    except config.ConfigException:
        config.load_kube_config()
        print("[rmrancher] using kubeconfig (local)")


def delete_options(cfg: TeardownConfig) -> client.V1DeleteOptions:
    return client.V1DeleteOptions(
        propagation_policy=cfg.propagation_policy,
        grace_period_seconds=cfg.grace_period_seconds,
    )


# ─────────────────────────────────────────────
# management.cattle.io API wrapper
# ─────────────────────────────────────────────
class ManagementGateway:
    def __init__(self, api: Optional[client.CustomObjectsApi] = None):
        self.api = api or client.CustomObjectsApi()

    @staticmethod
    def _plural(kind: str) -> Tuple[str, bool]:
        try:
            return MANAGEMENT_KINDS[kind]
        except KeyError:
            raise ValueError(f"unknown management kind {kind!r}") from None

    def list(self, kind: str, namespace: Optional[str] = None, label_selector: Optional[str] = None) -> List[ManagedResource]:
        plural, namespaced = self._plural(kind)
        kwargs = {"label_selector": label_selector} if label_selector else {}
        if namespaced and namespace:
            res = self.api.list_namespaced_custom_object(
                group=MANAGEMENT_GROUP,
                version=MANAGEMENT_VERSION,
                namespace=namespace,
                plural=plural,
                **kwargs,
            )
        else:
            res = self.api.list_cluster_custom_object(
                group=MANAGEMENT_GROUP,
                version=MANAGEMENT_VERSION,
                plural=plural,
                **kwargs,
            )
        out: List[ManagedResource] = []
        for item in res.get("items", []) or []:
            meta = item.get("metadata", {}) or {}
            out.append(ManagedResource(kind=kind, name=meta.get("name", ""), namespace=meta.get("namespace", "") or ""))
        return out

    def delete(self, kind: str, name: str, namespace: Optional[str] = None, options: Optional[client.V1DeleteOptions] = None) -> None:
        plural, namespaced = self._plural(kind)
        if namespaced:
            self.api.delete_namespaced_custom_object(
                group=MANAGEMENT_GROUP,
                version=MANAGEMENT_VERSION,
                namespace=namespace or "",
                plural=plural,
                name=name,
                body=options,
            )
        else:
            self.api.delete_cluster_custom_object(
                group=MANAGEMENT_GROUP,
                version=MANAGEMENT_VERSION,
                plural=plural,
                name=name,
                body=options,
            )


# ─────────────────────────────────────────────
# core/v1 + rbac/v1 API wrapper
# ─────────────────────────────────────────────
class ClusterGateway:
    def __init__(self, corev1: Optional[client.CoreV1Api] = None, rbac: Optional[client.RbacAuthorizationV1Api] = None):
        self.corev1 = corev1 or client.CoreV1Api()
        self.rbac = rbac or client.RbacAuthorizationV1Api()

    def list(self, kind: str, namespace: Optional[str] = None, label_selector: Optional[str] = None) -> list:
        kwargs = {"label_selector": label_selector} if label_selector else {}
        if kind == "namespace":
            return self.corev1.list_namespace(**kwargs).items
        if kind == "secret":
            if namespace:
                return self.corev1.list_namespaced_secret(namespace, **kwargs).items
            return self.corev1.list_secret_for_all_namespaces(**kwargs).items
        if kind == "clusterrole":
            return self.rbac.list_cluster_role(**kwargs).items
        if kind == "clusterrolebinding":
            return self.rbac.list_cluster_role_binding(**kwargs).items
        raise ValueError(f"unknown cluster kind {kind!r}")

    def delete(self, kind: str, name: str, namespace: Optional[str] = None, options: Optional[client.V1DeleteOptions] = None) -> None:
        if kind == "namespace":
            self.corev1.delete_namespace(name, body=options)
        elif kind == "secret":
            self.corev1.delete_namespaced_secret(name, namespace, body=options)
        elif kind == "clusterrole":
            self.rbac.delete_cluster_role(name, body=options)
        elif kind == "clusterrolebinding":
            self.rbac.delete_cluster_role_binding(name, body=options)
        else:
            raise ValueError(f"unknown cluster kind {kind!r}")

    def update(self, kind: str, obj):
        meta = obj.metadata
        if kind == "namespace":
            return self.corev1.replace_namespace(meta.name, obj)
        if kind == "secret":
            return self.corev1.replace_namespaced_secret(meta.name, meta.namespace, obj)
        raise ValueError(f"cannot update kind {kind!r}")


def connect(kubeconfig: Optional[str] = None) -> Tuple[ManagementGateway, ClusterGateway]:
    load_kube(kubeconfig)
    return ManagementGateway(), ClusterGateway()
