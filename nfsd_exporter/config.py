"""Runtime settings read from the environment.

Explicit constructor values win; environment variables only replace defaults.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from .ingestion.procfs import DEFAULT_PROC_PATH
from .collector.nfsd import DEFAULT_NAMESPACE

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 9100


def _split_names(raw: str) -> FrozenSet[str]:
    return frozenset(n.strip() for n in raw.split(',') if n.strip())


@dataclass(frozen=True)
class Settings:
    proc_path: str = DEFAULT_PROC_PATH
    namespace: str = DEFAULT_NAMESPACE
    disabled_collectors: FrozenSet[str] = field(default_factory=frozenset)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        port = DEFAULT_PORT
        if 'PORT' in env:
            try:
                port = int(env['PORT'])
            except ValueError:
                pass
        return cls(
            proc_path=env.get('NFSD_EXPORTER_PROC_PATH', DEFAULT_PROC_PATH),
            namespace=env.get('NFSD_EXPORTER_NAMESPACE', DEFAULT_NAMESPACE),
            disabled_collectors=_split_names(env.get('NFSD_EXPORTER_COLLECTORS_DISABLED', '')),
            host=env.get('HOST', DEFAULT_HOST),
            port=port,
        )
