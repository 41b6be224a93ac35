#!/usr/bin/env python3
"""
Render the NFSd metrics for a proc root once and print them.

Handy for checking a captured /proc/net/rpc/nfsd (copy it to <root>/net/rpc/nfsd)
without starting the HTTP server:

    render_nfsd_metrics.py --proc-path /tmp/capture            # Prometheus text
    render_nfsd_metrics.py --proc-path /tmp/capture --json     # one JSON object per sample
"""
from __future__ import annotations
import argparse, json, sys

from nfsd_exporter.collector.nfsd import DEFAULT_NAMESPACE, NFSdCollector
from nfsd_exporter.collector.prometheus import render
from nfsd_exporter.ingestion.parser import StatsUnavailable
from nfsd_exporter.ingestion.procfs import DEFAULT_PROC_PATH, ProcFS


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument('--proc-path', default=DEFAULT_PROC_PATH, help='procfs mount point (default: %(default)s)')
    ap.add_argument('--namespace', default=DEFAULT_NAMESPACE, help='metric namespace (default: %(default)s)')
    ap.add_argument('--json', action='store_true', help='print samples as JSON lines instead of exposition text')
    args = ap.parse_args(argv)

    collector = NFSdCollector(ProcFS(args.proc_path), namespace=args.namespace)
    try:
        if args.json:
            collector.update(lambda s: print(json.dumps(s.as_dict(), ensure_ascii=False)))
        else:
            sys.stdout.write(render(collector).decode('utf-8'))
    except StatsUnavailable as e:
        print(f'error: {e}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
