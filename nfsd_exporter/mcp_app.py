from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .config import Settings
from .collector.nfsd import NFSdCollector
from .collector.registry import build_default_registry
from .collector.schema_spec import NFSD_SUBSYSTEM, lookup_metric, nfsd_descriptors
from .ingestion.parser import StatsUnavailable, snapshot_to_dict
from .ingestion.procfs import ProcFS
from .debug_util import dbg

# ----------------- System Prompt Guidance -----------------
SYSTEM_PROMPT = (
    "NFS server state tools:\n"
    "1. nfsd_stats() -> decoded /proc/net/rpc/nfsd snapshot (reply cache, file handles, io, threads, read-ahead cache, network, rpc, per-version procedure counts).\n"
    "2. nfsd_samples() -> the metric samples one scrape would expose (name, kind, help, labels, value).\n"
    "3. metric_schema(metric_name) -> kind, help, labels and source field for a metric (full name or suffix such as server_threads).\n"
    "4. list_collectors() shows registered collectors and whether each is enabled.\n"
    "Counters are cumulative since nfsd start; compare two nfsd_samples() calls to reason about rates.\n"
)

mcp = FastMCP("nfsd-exporter")
SETTINGS: Settings = Settings.from_env()


def _collector(settings: Optional[Settings] = None) -> NFSdCollector:
    s = settings or SETTINGS
    return NFSdCollector(ProcFS(s.proc_path), namespace=s.namespace)


def init_server(settings: Optional[Settings] = None) -> dict:
    """Load settings and read the stats source once as a health check.

    Returns a status dict; an unreadable source is reported, not raised.
    """
    global SETTINGS
    SETTINGS = settings or Settings.from_env()
    status: Dict[str, Any] = {'proc_path': SETTINGS.proc_path, 'namespace': SETTINGS.namespace}
    try:
        ProcFS(SETTINGS.proc_path).read_nfsd_stats()
        status['nfsd'] = 'ok'
    except StatsUnavailable as e:
        status['nfsd'] = f'error:{e}'
    return status


@mcp.tool()
def nfsd_stats() -> dict:
    """Return the current decoded NFS server statistics snapshot.

    Returns {proc_path, stats{reply_cache, file_handles, input_output, threads, read_ahead_cache,
    network, server_rpc, procedures}} or {'error':'stats_unavailable','detail':...}."""
    source = ProcFS(SETTINGS.proc_path)
    try:
        snap = source.read_nfsd_stats()
    except StatsUnavailable as e:
        return {'error': 'stats_unavailable', 'detail': str(e), 'path': e.path}
    return {'proc_path': SETTINGS.proc_path, 'stats': snapshot_to_dict(snap)}


@mcp.tool()
def nfsd_samples() -> dict:
    """Return the metric samples for one collection cycle (same values /metrics would expose)."""
    out: List[dict] = []
    try:
        _collector().update(lambda s: out.append(s.as_dict()))
    except StatsUnavailable as e:
        return {'error': 'stats_unavailable', 'detail': str(e), 'path': e.path}
    dbg(f'nfsd_samples count={len(out)}')
    return {'samples': out}


@mcp.tool()
def metric_schema(metric_name: str) -> dict:
    """Lookup a metric's kind, help text, labels and the snapshot field(s) it reads.

    Accepts the full name (node_nfsd_server_threads) or the suffix (server_threads).
    Returns {'error':'metric_not_found'} for anything else."""
    found = lookup_metric(metric_name, SETTINGS.namespace)
    if not found:
        return {'error': 'metric_not_found', 'metric_name': metric_name}
    grp, suffix, meta = found
    desc = nfsd_descriptors(SETTINGS.namespace)[suffix]
    return {
        'metric_name': desc.name,
        'subsystem': NFSD_SUBSYSTEM,
        'kind': desc.kind,
        'help': desc.help,
        'label_names': list(desc.label_names),
        'series': [
            {'labels': dict(zip(desc.label_names, s.label_values)), 'field': f'{grp.record}.{s.field}'}
            for s in meta.series
        ],
    }


@mcp.tool()
def list_collectors() -> List[dict]:
    """List registered collectors with their enabled flag for the current settings."""
    registry = build_default_registry()
    return [
        {'name': name, 'enabled': name not in SETTINGS.disabled_collectors and registry.is_enabled(name)}
        for name in registry.names()
    ]


if __name__ == '__main__':
    print('Initializing server...')
    print(init_server())
    print(f'Starting FastMCP on {SETTINGS.host}:{SETTINGS.port}')
    mcp.run(transport="http", host=SETTINGS.host, port=SETTINGS.port)
