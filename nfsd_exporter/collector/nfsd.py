from __future__ import annotations
from typing import Callable, Iterator, Optional

from .sample import MetricSample
from .schema_spec import NFSD_SPEC, nfsd_descriptors
from ..ingestion.parser import StatSnapshot
from ..ingestion.procfs import ProcFS, StatsSource
from ..debug_util import dbg

Sink = Callable[[MetricSample], None]

DEFAULT_NAMESPACE = 'node'


class NFSdCollector:
    """Exposes /proc/net/rpc/nfsd statistics as metric samples.

    See: https://www.svennd.be/nfsd-stats-explained-procnetrpcnfsd/
    """

    name = 'nfsd'

    def __init__(self, source: Optional[StatsSource] = None, namespace: str = DEFAULT_NAMESPACE):
        self.source = source if source is not None else ProcFS()
        self.namespace = namespace
        self._descs = nfsd_descriptors(namespace)

    def update(self, sink: Sink) -> None:
        """Read one snapshot and hand every sample to `sink`, in group order.

        Raises StatsUnavailable before anything is emitted if the snapshot
        cannot be obtained.
        """
        stats = self.source.read_nfsd_stats()
        emitted = 0
        for sample in self.samples(stats):
            sink(sample)
            emitted += 1
        dbg(f'nfsd update emitted={emitted}')

    def samples(self, stats: StatSnapshot) -> Iterator[MetricSample]:
        for grp in NFSD_SPEC:
            record = getattr(stats, grp.record)
            for suffix, meta in grp.metrics.items():
                desc = self._descs[suffix]
                for series in meta.series:
                    yield MetricSample(desc, float(getattr(record, series.field)), series.label_values)
