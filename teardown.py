# teardown.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import yaml

from config import TeardownConfig
from delete import ALREADY_ABSENT, delete
from errors import AggregateError
from k8s import ManagedResource, delete_options
from sanitize import sanitize_namespaces, sanitize_secrets
from scrub import scrub_metadata

# Deletion order across managed kinds.
MANAGED_KINDS = ("project", "cluster", "user")

ObjectRef = Tuple[str, str]  # (kind, name)


class TeardownPlan(dict):
    """A small, json-serializable description of what a run would touch."""

    # kept as dict subclass for easy printing/YAML dumping


@dataclass
class TeardownReport:
    deleted: List[ObjectRef] = field(default_factory=list)
    absent: List[ObjectRef] = field(default_factory=list)
    cleaned_namespaces: List[str] = field(default_factory=list)
    cleaned_secrets: List[str] = field(default_factory=list)
    sanitize_errors: List[BaseException] = field(default_factory=list)


def _union(*groups: List[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for names in groups:
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            out.append(name)
    return out


class Teardown:
    """One teardown run: a fresh snapshot of the cluster, then deletes in a fixed order.

    Stages:
      1) inventory    list projects, clusters, users
      2) sanitize     strip controller finalizers/labels from namespaces and secrets
      3) managed      per kind: backing namespace first, then the resource
      4) protection   cluster roles (discovered + static) and cluster role bindings
      5) namespace    the installation namespace, last

    Any delete failure other than not-found raises TeardownError and stops the run.
    Sanitize failures are reported and tolerated.
    """

    def __init__(self, cfg: TeardownConfig, management, cluster):
        self.cfg = cfg
        self.management = management
        self.cluster = cluster
        self.options = delete_options(cfg)
        self.report = TeardownReport()

    # ─────────────────────────────────────────────
    # Read-only stages
    # ─────────────────────────────────────────────
    def inventory(self) -> Dict[str, List[ManagedResource]]:
        return {kind: self.management.list(kind) for kind in MANAGED_KINDS}

    def protection_objects(self) -> List[ObjectRef]:
        selector = (self.cfg.label_selector or "").strip()
        if not selector:
            # an empty selector would match every cluster role, cluster-admin and system:* included
            raise ValueError("refusing to discover cluster roles without a label selector")
        roles = [r.metadata.name for r in self.cluster.list("clusterrole", label_selector=selector)]
        bindings = [b.metadata.name for b in self.cluster.list("clusterrolebinding", label_selector=selector)]
        refs: List[ObjectRef] = [("clusterrole", n) for n in _union(roles, list(self.cfg.static_cluster_roles))]
        refs.extend(("clusterrolebinding", n) for n in _union(bindings))
        return refs

    # ─────────────────────────────────────────────
    # Mutating stages
    # ─────────────────────────────────────────────
    def _delete(self, gateway, kind: str, name: str, namespace: str = "") -> None:
        res = delete(gateway, kind, name, namespace=namespace or None, options=self.options)
        res.raise_for_failure()
        if res.outcome == ALREADY_ABSENT:
            self.report.absent.append((kind, name))
        else:
            self.report.deleted.append((kind, name))

    def sanitize(self) -> None:
        if self.cfg.skip_sanitize:
            print("[teardown] skipping namespace/secret cleanup")
            return
        try:
            self.report.cleaned_namespaces = sanitize_namespaces(self.cluster, self.cfg)
        except AggregateError as e:
            print(f"[teardown] namespace cleanup incomplete ({len(e)} failed): {e}")
            self.report.sanitize_errors.extend(e.errors)
        try:
            self.report.cleaned_secrets = sanitize_secrets(self.cluster, self.cfg)
        except AggregateError as e:
            print(f"[teardown] secret cleanup incomplete ({len(e)} failed): {e}")
            self.report.sanitize_errors.extend(e.errors)

    def delete_managed(self, inventory: Dict[str, List[ManagedResource]]) -> None:
        for kind in MANAGED_KINDS:
            for res in inventory.get(kind, []):
                print(f"[teardown] deleting {kind} [{res.name}]..")
                # backing namespace shares the resource's name
                self._delete(self.cluster, "namespace", res.name)
                self._delete(self.management, kind, res.name, namespace=res.namespace)

    def delete_protection(self) -> None:
        for kind, name in self.protection_objects():
            label = "cluster role" if kind == "clusterrole" else "cluster role binding"
            print(f"[teardown] deleting {label} [{name}]..")
            self._delete(self.cluster, kind, name)

    def delete_installation_namespace(self) -> None:
        print(f"[teardown] removing rancher deployment namespace [{self.cfg.namespace}]")
        self._delete(self.cluster, "namespace", self.cfg.namespace)

    def run(self) -> TeardownReport:
        inventory = self.inventory()
        self.sanitize()
        self.delete_managed(inventory)
        self.delete_protection()
        self.delete_installation_namespace()
        return self.report


def plan_teardown(td: Teardown) -> TeardownPlan:
    """Compute what Teardown.run() *would* do, without updating/deleting anything."""
    cfg = td.cfg
    inventory = td.inventory()

    scrub_ns: List[str] = []
    scrub_secrets: List[str] = []
    if not cfg.skip_sanitize:
        for ns in td.cluster.list("namespace"):
            m = ns.metadata
            if scrub_metadata(m.finalizers, m.labels, m.annotations, cfg.controller_name, cfg.label_base).changed:
                scrub_ns.append(m.name)
        for s in td.cluster.list("secret"):
            m = s.metadata
            if not m.finalizers:
                continue
            if scrub_metadata(m.finalizers, m.labels, m.annotations, cfg.controller_name, cfg.label_base).changed:
                scrub_secrets.append(f"{m.namespace}/{m.name}")

    protection = td.protection_objects()

    return TeardownPlan(
        namespace=cfg.namespace,
        counts={
            "scrub": len(scrub_ns) + len(scrub_secrets),
            "managed": sum(len(v) for v in inventory.values()),
            "protection": len(protection),
        },
        scrub={"namespaces": scrub_ns, "secrets": scrub_secrets},
        managed={kind: [r.name for r in inventory[kind]] for kind in MANAGED_KINDS},
        clusterroles=[n for k, n in protection if k == "clusterrole"],
        clusterrolebindings=[n for k, n in protection if k == "clusterrolebinding"],
    )


def print_plan(plan: TeardownPlan, output: str = "text") -> None:
    if output == "yaml":
        print(yaml.safe_dump(dict(plan), sort_keys=False).rstrip())
        return
    counts = plan.get("counts", {})
    print(
        f"[plan] namespace={plan.get('namespace')} scrub={counts.get('scrub', 0)} "
        f"managed={counts.get('managed', 0)} protection={counts.get('protection', 0)}"
    )
    scrub = plan.get("scrub", {}) or {}
    for k in ("namespaces", "secrets"):
        items = scrub.get(k, []) or []
        if not items:
            continue
        print(f"[plan] scrub {k}:")
        for name in items:
            print(f"  - {name}")
    for kind, names in (plan.get("managed", {}) or {}).items():
        if not names:
            continue
        print(f"[plan] delete {kind}s (with namespaces):")
        for name in names:
            print(f"  - {name}")
    for k in ("clusterroles", "clusterrolebindings"):
        items = plan.get(k, []) or []
        if not items:
            continue
        print(f"[plan] delete {k}:")
        for name in items:
            print(f"  - {name}")
    print(f"[plan] delete namespace {plan.get('namespace')} (last)")
