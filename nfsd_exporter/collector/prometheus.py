"""prometheus_client adapter: one update() cycle -> metric families."""
from __future__ import annotations
from typing import Dict, Iterator, List

from prometheus_client import CollectorRegistry as PromRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .registry import Collector
from .sample import COUNTER, Desc, MetricSample


def to_families(samples: List[MetricSample]) -> List[Metric]:
    """Group samples by descriptor; samples sharing a descriptor become one family."""
    families: Dict[Desc, Metric] = {}
    for s in samples:
        fam = families.get(s.desc)
        if fam is None:
            cls = CounterMetricFamily if s.desc.kind == COUNTER else GaugeMetricFamily
            fam = cls(s.desc.name, s.desc.help, labels=list(s.desc.label_names))
            families[s.desc] = fam
        fam.add_metric(list(s.label_values), s.value)
    return list(families.values())


class PrometheusBridge:
    """Custom prometheus_client collector wrapping one of ours."""

    def __init__(self, collector: Collector):
        self.collector = collector

    def collect(self) -> Iterator[Metric]:
        samples: List[MetricSample] = []
        self.collector.update(samples.append)
        yield from to_families(samples)


def make_registry(collector: Collector) -> PromRegistry:
    registry = PromRegistry(auto_describe=False)
    registry.register(PrometheusBridge(collector))
    return registry


def render(collector: Collector) -> bytes:
    return generate_latest(make_registry(collector))
