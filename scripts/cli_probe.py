"""CLI for probing file sizes through the plain or gzip backend."""
from __future__ import annotations

import argparse
import json
import logging

from fpwrap.config import get_settings
from fpwrap.models import PROBE_FAILURE, BackendKind, ProbeReport
from fpwrap.probe import probe_size


def guess_kind(path: str) -> BackendKind:
    return BackendKind.COMPRESSED if path.lower().endswith(".gz") else BackendKind.PLAIN


def build_report(path: str, kind: BackendKind | None = None) -> ProbeReport:
    kind = kind or guess_kind(path)
    size = probe_size(path, kind)
    ok = size != PROBE_FAILURE
    return ProbeReport(path=path, kind=kind, size=size if ok else None, ok=ok)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("paths", nargs="+")
    parser.add_argument("--kind", choices=[k.value for k in BackendKind], default=None,
                        help="force a backend instead of guessing from the .gz suffix")
    args = parser.parse_args(argv)

    logging.basicConfig(level=get_settings().log_level.upper())
    kind = BackendKind(args.kind) if args.kind else None
    reports = [build_report(p, kind) for p in args.paths]
    print(json.dumps([r.model_dump(mode="json") for r in reports], indent=2))
    return 0 if all(r.ok for r in reports) else 1


if __name__ == "__main__":
    raise SystemExit(main())
