from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Tuple

from ..debug_util import PARSER, dbg, trace_enabled

"""NFSd server statistics parser (/proc/net/rpc/nfsd)

Line layout (one record per line, first token is the key):

    rc <hits> <misses> <nocache>
    fh <stale> <total_lookups> <anon_lookups> <dir_no_cache> <no_dir_no_cache>
    io <read_bytes> <write_bytes>
    th <threads> <full_cnt> <10 busy histogram floats>
    ra <cache_size> <10 depth buckets> <not_found>
    net <net_count> <udp_count> <tcp_count> <tcp_connect>
    rpc <rpc_count> <bad_cnt> <bad_fmt> <bad_auth> <bad_clnt>
    proc2|proc3|proc4|proc4ops <n> <v1> ... <vn>

Kernel drift:
  * fh: only 'stale' is still maintained; recent kernels may print fewer fields,
    missing ones decode as 0.
  * th: the busy histogram was dropped in 2009 and printed as 0.000 floats on
    some kernels; only the two leading integers are decoded.
  * ra: the read-ahead cache line is gone on recent kernels. Absent groups
    decode as all-zero records.
Unknown keys are skipped so new kernel lines never break a scrape.
"""

RA_HISTOGRAM_BUCKETS = 10
MAX_COUNTER = 2**64 - 1
PROCEDURE_KEYS = ('proc2', 'proc3', 'proc4', 'proc4ops')


class StatsUnavailable(Exception):
    """The NFSd statistics source could not be opened or decoded."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class ReplyCache:
    hits: int = 0
    misses: int = 0
    nocache: int = 0


@dataclass(frozen=True)
class FileHandles:
    # Only 'stale' is maintained by the kernel; the rest are kept for completeness.
    stale: int = 0
    total_lookups: int = 0
    anon_lookups: int = 0
    dir_no_cache: int = 0
    no_dir_no_cache: int = 0


@dataclass(frozen=True)
class InputOutput:
    read: int = 0
    write: int = 0


@dataclass(frozen=True)
class Threads:
    threads: int = 0
    full_cnt: int = 0


@dataclass(frozen=True)
class ReadAheadCache:
    cache_size: int = 0
    cache_histogram: Tuple[int, ...] = ()
    not_found: int = 0


@dataclass(frozen=True)
class Network:
    net_count: int = 0
    udp_count: int = 0
    tcp_count: int = 0
    tcp_connect: int = 0


@dataclass(frozen=True)
class ServerRPC:
    rpc_count: int = 0
    bad_cnt: int = 0
    bad_fmt: int = 0
    bad_auth: int = 0
    bad_clnt: int = 0


@dataclass(frozen=True)
class StatSnapshot:
    reply_cache: ReplyCache = field(default_factory=ReplyCache)
    file_handles: FileHandles = field(default_factory=FileHandles)
    input_output: InputOutput = field(default_factory=InputOutput)
    threads: Threads = field(default_factory=Threads)
    read_ahead_cache: ReadAheadCache = field(default_factory=ReadAheadCache)
    network: Network = field(default_factory=Network)
    server_rpc: ServerRPC = field(default_factory=ServerRPC)
    # procN key -> per-procedure call counts, in kernel order
    procedures: Dict[str, Tuple[int, ...]] = field(default_factory=dict)


@dataclass
class ParsedRecord:
    prefix: str
    values: List[str]
    raw: str
    lineno: int


def _ints(rec: ParsedRecord, count: int) -> List[int]:
    """Decode the first `count` values of a record as integers."""
    if len(rec.values) < count:
        raise ValueError(f"line {rec.lineno}: '{rec.prefix}' expects at least {count} values, got {len(rec.values)}: {rec.raw!r}")
    out = []
    for v in rec.values[:count]:
        # procfs prints plain unsigned 64-bit decimals only
        if not (v.isascii() and v.isdigit()) or len(v) > 20 or int(v) > MAX_COUNTER:
            raise ValueError(f"line {rec.lineno}: invalid counter {v[:32]!r} in '{rec.prefix}' line")
        out.append(int(v))
    return out


class NFSdStatsParser:
    """Decode the text of /proc/net/rpc/nfsd into a StatSnapshot."""

    def __init__(self, text: str):
        self.text = text

    @classmethod
    def from_path(cls, path: str) -> "NFSdStatsParser":
        with open(path, 'r', encoding='utf-8') as f:
            return cls(f.read())

    def iter_records(self) -> Iterator[ParsedRecord]:
        for lineno, raw in enumerate(self.text.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue
            if trace_enabled(PARSER):
                dbg(f"line={line[:120]}", PARSER)
            parts = line.split()
            yield ParsedRecord(parts[0], parts[1:], line, lineno)

    def parse(self) -> StatSnapshot:
        groups: Dict[str, object] = {}
        procedures: Dict[str, Tuple[int, ...]] = {}
        recognised = 0
        for rec in self.iter_records():
            handler = self._handlers.get(rec.prefix)
            if handler is not None:
                attr, value = handler(rec)
                groups[attr] = value
                recognised += 1
            elif rec.prefix in PROCEDURE_KEYS:
                procedures[rec.prefix] = self._procedures(rec)
                recognised += 1
            else:
                dbg(f"nfsd parser skip_unknown_line key={rec.prefix!r} line={rec.lineno}")
        if not recognised:
            raise ValueError("no NFSd statistics lines found")
        return StatSnapshot(procedures=procedures, **groups)

    @staticmethod
    def _reply_cache(rec: ParsedRecord):
        hits, misses, nocache = _ints(rec, 3)
        return 'reply_cache', ReplyCache(hits, misses, nocache)

    @staticmethod
    def _file_handles(rec: ParsedRecord):
        # Older kernels print five fields, newer ones may only print 'stale'.
        n = max(min(len(rec.values), 5), 1)
        values = _ints(rec, n) + [0] * (5 - n)
        return 'file_handles', FileHandles(*values)

    @staticmethod
    def _input_output(rec: ParsedRecord):
        read, write = _ints(rec, 2)
        return 'input_output', InputOutput(read, write)

    @staticmethod
    def _threads(rec: ParsedRecord):
        threads, full_cnt = _ints(rec, 2)
        return 'threads', Threads(threads, full_cnt)

    @staticmethod
    def _read_ahead_cache(rec: ParsedRecord):
        values = _ints(rec, RA_HISTOGRAM_BUCKETS + 2)
        return 'read_ahead_cache', ReadAheadCache(
            cache_size=values[0],
            cache_histogram=tuple(values[1:RA_HISTOGRAM_BUCKETS + 1]),
            not_found=values[RA_HISTOGRAM_BUCKETS + 1],
        )

    @staticmethod
    def _network(rec: ParsedRecord):
        net_count, udp_count, tcp_count, tcp_connect = _ints(rec, 4)
        return 'network', Network(net_count, udp_count, tcp_count, tcp_connect)

    @staticmethod
    def _server_rpc(rec: ParsedRecord):
        return 'server_rpc', ServerRPC(*_ints(rec, 5))

    @staticmethod
    def _procedures(rec: ParsedRecord) -> Tuple[int, ...]:
        (count,) = _ints(rec, 1)
        if len(rec.values) - 1 != count:
            raise ValueError(f"line {rec.lineno}: '{rec.prefix}' announces {count} values, got {len(rec.values) - 1}")
        return tuple(_ints(rec, count + 1)[1:])

    _handlers = {
        'rc': _reply_cache.__func__,
        'fh': _file_handles.__func__,
        'io': _input_output.__func__,
        'th': _threads.__func__,
        'ra': _read_ahead_cache.__func__,
        'net': _network.__func__,
        'rpc': _server_rpc.__func__,
    }


def parse_nfsd_stats(text: str) -> StatSnapshot:
    return NFSdStatsParser(text).parse()


def snapshot_to_dict(snapshot: StatSnapshot) -> Dict[str, object]:
    """Plain-dict view of a snapshot (tuples become lists) for JSON surfaces."""
    out = asdict(snapshot)
    out['read_ahead_cache']['cache_histogram'] = list(snapshot.read_ahead_cache.cache_histogram)
    out['procedures'] = {k: list(v) for k, v in snapshot.procedures.items()}
    return out


__all__ = [
    'StatsUnavailable', 'ReplyCache', 'FileHandles', 'InputOutput', 'Threads',
    'ReadAheadCache', 'Network', 'ServerRPC', 'StatSnapshot', 'NFSdStatsParser',
    'parse_nfsd_stats', 'snapshot_to_dict',
]
