import os
from typing import Protocol

from .parser import NFSdStatsParser, StatSnapshot, StatsUnavailable
from ..debug_util import dbg

DEFAULT_PROC_PATH = '/proc'
NFSD_STATS_RELPATH = os.path.join('net', 'rpc', 'nfsd')


class StatsSource(Protocol):
    def read_nfsd_stats(self) -> StatSnapshot: ...


class ProcFS:
    """Accessor for NFSd server statistics under a procfs mount point.

    Each call re-reads the file; nothing is retained between cycles.
    """

    def __init__(self, proc_path: str = DEFAULT_PROC_PATH):
        self.proc_path = proc_path

    @property
    def nfsd_path(self) -> str:
        return os.path.join(self.proc_path, NFSD_STATS_RELPATH)

    def read_nfsd_stats(self) -> StatSnapshot:
        path = self.nfsd_path
        try:
            snapshot = NFSdStatsParser.from_path(path).parse()
        except (OSError, ValueError) as e:
            dbg(f'read_nfsd_stats failed path={path} err={e.__class__.__name__}:{e}')
            raise StatsUnavailable(f'failed to retrieve nfsd stats: {e}', path=path) from e
        dbg(f'read_nfsd_stats ok path={path} threads={snapshot.threads.threads}')
        return snapshot
