# sanitize.py
from __future__ import annotations

from typing import List

from config import TeardownConfig
from errors import AggregateError
from scrub import scrub_object


def sanitize_namespaces(gateway, cfg: TeardownConfig) -> List[str]:
    """Scrub every namespace. Labels/annotations may need cleanup even without finalizers."""
    cleaned: List[str] = []
    errs: List[BaseException] = []
    for ns in gateway.list("namespace"):
        if not scrub_object(ns, cfg.controller_name, cfg.label_base):
            continue
        name = ns.metadata.name
        try:
            gateway.update("namespace", ns)
        except Exception as e:
            print(f"[sanitize] failed to clean namespace {name}: {e}")
            errs.append(e)
            continue
        print(f"[sanitize] cleaned namespace {name}")
        cleaned.append(name)
    if errs:
        raise AggregateError(errs)
    return cleaned


def sanitize_secrets(gateway, cfg: TeardownConfig) -> List[str]:
    cleaned: List[str] = []
    errs: List[BaseException] = []
    for secret in gateway.list("secret"):
        meta = secret.metadata
        if not meta.finalizers:
            continue
        if not scrub_object(secret, cfg.controller_name, cfg.label_base):
            continue
        ref = f"{meta.namespace}/{meta.name}"
        try:
            gateway.update("secret", secret)
        except Exception as e:
            print(f"[sanitize] failed to clean secret {ref}: {e}")
            errs.append(e)
            continue
        print(f"[sanitize] cleaned secret {ref}")
        cleaned.append(ref)
    if errs:
        raise AggregateError(errs)
    return cleaned
