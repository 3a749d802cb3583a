# app.py
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import HTTPError

from config import VERSION, load_config
from errors import TeardownError
from k8s import connect
from teardown import Teardown, plan_teardown, print_plan


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="rmrancher", description="A tool to uninstall rancher 2.0 deployments")
    p.add_argument("-c", "--kubeconfig", default=os.environ.get("KUBECONFIG"),
                   help="kubeconfig absolute path (default $KUBECONFIG)")
    p.add_argument("-n", "--namespace", default=None,
                   help="rancher 2.0 deployment namespace (default $NAMESPACE or cattle-system)")
    p.add_argument("--dry-run", action="store_true", help="print what would be removed and exit")
    p.add_argument("-o", "--output", choices=("text", "yaml"), default="text",
                   help="plan format for --dry-run")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.namespace)

    try:
        management, cluster = connect(args.kubeconfig)
        td = Teardown(cfg, management, cluster)

        if args.dry_run:
            print_plan(plan_teardown(td), output=args.output)
            return 0

        report = td.run()
    except (TeardownError, ApiException, ConfigException, HTTPError, ValueError) as e:
        print(f"[rmrancher] teardown failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("[rmrancher] interrupted", file=sys.stderr)
        return 130

    print(
        f"[rmrancher] done: deleted={len(report.deleted)} already-absent={len(report.absent)} "
        f"cleaned={len(report.cleaned_namespaces) + len(report.cleaned_secrets)}"
    )
    if report.sanitize_errors:
        print(f"[rmrancher] {len(report.sanitize_errors)} object(s) could not be cleaned")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
