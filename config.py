# config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

VERSION = "v0.0.1-dev"

DEFAULT_NAMESPACE = "cattle-system"
CONTROLLER_NAME = "controller.cattle.io"
LABEL_BASE = "cattle.io"
CREATOR_SELECTOR = "cattle.io/creator=norman"

# Roles the installation creates without the creator label.
STATIC_CLUSTER_ROLES: Tuple[str, ...] = (
    "cluster-owner",
    "create-ns",
    "project-owner",
    "project-owner-promoted",
)


@dataclass(frozen=True)
class TeardownConfig:
    namespace: str = DEFAULT_NAMESPACE
    controller_name: str = CONTROLLER_NAME
    label_base: str = LABEL_BASE
    label_selector: str = CREATOR_SELECTOR
    static_cluster_roles: Tuple[str, ...] = STATIC_CLUSTER_ROLES
    propagation_policy: str = "Background"
    grace_period_seconds: int = 0
    skip_sanitize: bool = False


def load_config(namespace: Optional[str] = None) -> TeardownConfig:
    """
    Build the run configuration.
    Priority for the installation namespace:
      1) explicit argument (CLI flag)
      2) environment variable NAMESPACE
      3) cattle-system
    """
    ns = namespace or os.environ.get("NAMESPACE") or DEFAULT_NAMESPACE
    return TeardownConfig(
        namespace=ns,
        label_selector=os.environ.get("RMRANCHER_LABEL_SELECTOR", "").strip() or CREATOR_SELECTOR,
        skip_sanitize=os.environ.get("RMRANCHER_SKIP_SANITIZE", "0") == "1",
    )
