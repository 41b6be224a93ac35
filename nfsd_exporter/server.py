import time
from typing import Dict, List

from fastapi import FastAPI, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel

from .config import Settings
from .collector.nfsd import NFSdCollector
from .collector.prometheus import render
from .collector.registry import build_node_collector
from .ingestion.parser import StatsUnavailable
from .debug_util import dbg

SETTINGS = Settings.from_env()
NODE_COLLECTOR = build_node_collector(SETTINGS)


def configure(settings: Settings) -> None:
    """Swap the settings and rebuild the collector set (startup / tests)."""
    global SETTINGS, NODE_COLLECTOR
    SETTINGS = settings
    NODE_COLLECTOR = build_node_collector(settings)


app = FastAPI(title="nfsd-exporter")


class Sample(BaseModel):
    name: str
    kind: str
    help: str
    labels: Dict[str, str] = {}
    value: float


class SamplesResponse(BaseModel):
    samples: List[Sample]


@app.get("/")
def root():
    return {"status": "ok", "service": "nfsd-exporter", "metrics_path": "/metrics"}


@app.get("/healthz")
def healthz():
    return {"status": "ok", "time": int(time.time()*1000)}


@app.get("/metrics")
def metrics():
    body = render(NODE_COLLECTOR)
    return Response(content=body, media_type=CONTENT_TYPE_LATEST)


@app.get("/api/v1/samples", response_model=SamplesResponse)
def samples():
    collector = NODE_COLLECTOR.collectors.get(NFSdCollector.name)
    if collector is None:
        raise HTTPException(status_code=404, detail=f"collector '{NFSdCollector.name}' is disabled")
    out: List[Sample] = []
    try:
        collector.update(lambda s: out.append(Sample(**s.as_dict())))
    except StatsUnavailable as e:
        dbg(f'samples unavailable path={e.path} err={e}')
        raise HTTPException(status_code=503, detail=str(e))
    return SamplesResponse(samples=out)
