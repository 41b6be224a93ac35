"""Explicit collector registration and per-scrape execution.

Nothing registers itself at import time: the host's startup routine builds a
CollectorRegistry (see build_default_registry) and instantiates the enabled
collectors from it.
"""
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol

from .sample import GAUGE, Desc, MetricSample, build_fq_name
from .nfsd import NFSdCollector, Sink
from ..config import Settings
from ..ingestion.procfs import ProcFS
from ..debug_util import dbg, logger


class Collector(Protocol):
    def update(self, sink: Sink) -> None: ...


Factory = Callable[[Settings], Collector]


@dataclass(frozen=True)
class Registration:
    name: str
    factory: Factory
    default_enabled: bool


class CollectorRegistry:
    def __init__(self):
        self._registrations: Dict[str, Registration] = {}
        self._overrides: Dict[str, bool] = {}

    def register(self, name: str, factory: Factory, default_enabled: bool = True) -> None:
        if name in self._registrations:
            raise ValueError(f'collector already registered: {name}')
        self._registrations[name] = Registration(name, factory, default_enabled)

    def set_enabled(self, name: str, enabled: bool) -> None:
        if name not in self._registrations:
            raise KeyError(f'unknown collector: {name}')
        self._overrides[name] = enabled

    def is_enabled(self, name: str) -> bool:
        return self._overrides.get(name, self._registrations[name].default_enabled)

    def names(self) -> List[str]:
        return sorted(self._registrations)

    def build(self, settings: Settings) -> Dict[str, Collector]:
        """Instantiate every enabled collector; a failing factory is logged and skipped.

        `settings.disabled_collectors` applies to this build only and leaves the
        registry's own flags untouched.
        """
        built: Dict[str, Collector] = {}
        for name in self.names():
            if not self.is_enabled(name) or name in settings.disabled_collectors:
                dbg(f'collector disabled name={name}')
                continue
            try:
                built[name] = self._registrations[name].factory(settings)
            except Exception as e:
                logger.error('couldn\'t create collector %s: %s', name, e)
        return built


class NodeCollector:
    """Runs each collector once per scrape and reports per-collector duration/success."""

    def __init__(self, collectors: Dict[str, Collector], namespace: str):
        self.collectors = collectors
        self.duration_desc = Desc(
            name=build_fq_name(namespace, 'scrape', 'collector_duration_seconds'),
            kind=GAUGE,
            help='Duration of a collector scrape.',
            label_names=('collector',),
        )
        self.success_desc = Desc(
            name=build_fq_name(namespace, 'scrape', 'collector_success'),
            kind=GAUGE,
            help='Whether a collector succeeded.',
            label_names=('collector',),
        )

    def update(self, sink: Sink) -> None:
        for name in sorted(self.collectors):
            self.execute(name, self.collectors[name], sink)

    def execute(self, name: str, collector: Collector, sink: Sink) -> bool:
        begin = time.monotonic()
        try:
            collector.update(sink)
            success = True
        except Exception as e:
            success = False
            logger.error('collector failed name=%s duration_seconds=%.6f err=%s', name, time.monotonic() - begin, e)
        duration = time.monotonic() - begin
        if success:
            dbg(f'collector succeeded name={name} duration_seconds={duration:.6f}')
        sink(MetricSample(self.duration_desc, duration, (name,)))
        sink(MetricSample(self.success_desc, 1.0 if success else 0.0, (name,)))
        return success


def build_default_registry() -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(
        NFSdCollector.name,
        lambda settings: NFSdCollector(ProcFS(settings.proc_path), namespace=settings.namespace),
        default_enabled=True,
    )
    return registry


def build_node_collector(settings: Settings, registry: CollectorRegistry | None = None) -> NodeCollector:
    registry = registry or build_default_registry()
    for name in sorted(settings.disabled_collectors):
        if name not in registry.names():
            logger.warning('ignoring unknown disabled collector %s', name)
    return NodeCollector(registry.build(settings), settings.namespace)
