from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

COUNTER = 'counter'
GAUGE = 'gauge'


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with '_' (node + nfsd + server_threads -> node_nfsd_server_threads)."""
    return '_'.join(p for p in (namespace, subsystem, name) if p)


@dataclass(frozen=True)
class Desc:
    name: str
    kind: str  # counter|gauge
    help: str
    label_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricSample:
    desc: Desc
    value: float
    label_values: Tuple[str, ...] = ()

    def __post_init__(self):
        if len(self.label_values) != len(self.desc.label_names):
            raise ValueError(f'{self.desc.name}: expected {len(self.desc.label_names)} label values, got {len(self.label_values)}')

    @property
    def name(self) -> str:
        return self.desc.name

    @property
    def kind(self) -> str:
        return self.desc.kind

    @property
    def help(self) -> str:
        return self.desc.help

    @property
    def labels(self) -> Dict[str, str]:
        return dict(zip(self.desc.label_names, self.label_values))

    def as_dict(self) -> dict:
        return {'name': self.name, 'kind': self.kind, 'help': self.help, 'labels': self.labels, 'value': self.value}
