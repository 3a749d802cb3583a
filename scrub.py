# scrub.py
"""Strip the installation controller's markers from object metadata.

A finalizer left behind by a controller that no longer runs keeps its object
in Terminating forever. The only way out without manual patching is to drop
the controller's own finalizers (and its labels/annotations) ourselves.

Everything here is pure: inputs are never mutated, callers decide whether to
persist the result based on ScrubResult.changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from config import CONTROLLER_NAME, LABEL_BASE


@dataclass
class ScrubResult:
    finalizers: List[str]
    labels: Optional[Dict[str, str]]
    annotations: Optional[Dict[str, str]]
    changed: bool


def scrub_finalizers(finalizers: Optional[List[str]], token: str = CONTROLLER_NAME) -> List[str]:
    # substring match: finalizers embed the controller name, e.g. "controller.cattle.io/namespace-auth"
    return [f for f in finalizers or [] if token not in f]


def scrub_keyed_map(m: Optional[Dict[str, str]], prefix: str = LABEL_BASE) -> Optional[Dict[str, str]]:
    if m is None:
        return None
    return {k: v for k, v in m.items() if prefix not in k}


def scrub_metadata(
    finalizers: Optional[List[str]],
    labels: Optional[Dict[str, str]],
    annotations: Optional[Dict[str, str]],
    token: str = CONTROLLER_NAME,
    prefix: str = LABEL_BASE,
) -> ScrubResult:
    fins = scrub_finalizers(finalizers, token)
    lbls = scrub_keyed_map(labels, prefix)
    anns = scrub_keyed_map(annotations, prefix)
    changed = (
        len(fins) != len(finalizers or [])
        or len(lbls or {}) != len(labels or {})
        or len(anns or {}) != len(annotations or {})
    )
    return ScrubResult(finalizers=fins, labels=lbls, annotations=anns, changed=changed)


def scrub_object(obj, token: str = CONTROLLER_NAME, prefix: str = LABEL_BASE) -> bool:
    """Scrub a client model object (V1Namespace, V1Secret) in place.

    Returns True if the metadata was modified and the object needs an update.
    """
    meta = obj.metadata
    res = scrub_metadata(meta.finalizers, meta.labels, meta.annotations, token, prefix)
    if not res.changed:
        return False
    meta.finalizers = res.finalizers
    meta.labels = res.labels
    meta.annotations = res.annotations
    return True
