"""
notegraph HTTP API

Thin FastAPI layer over GraphService:

    - graph document get / replace / import / export
    - layout and clustering runs by algorithm name
    - analytics, filtering and viewport optimisation

Build an app with ``create_app(service)``; without an argument a service is
constructed from the NOTEGRAPH_* environment variables.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .errors import AlgorithmNotFoundError, DuplicateNodeError
from .models import GraphData, GraphFilter, GraphLink, GraphNode
from .render import Viewport
from .service import GraphService

logger = logging.getLogger(__name__)


# ============================================================================
# Request models
# ============================================================================

class AlgorithmParams(BaseModel):
    params: Dict[str, Any] = Field(default_factory=dict)


class DateRangeIn(BaseModel):
    start: str
    end: str


class FilterIn(BaseModel):
    nodeTypes: Optional[List[str]] = None
    linkTypes: Optional[List[str]] = None
    minConnections: Optional[int] = None
    maxConnections: Optional[int] = None
    dateRange: Optional[DateRangeIn] = None
    tags: Optional[List[str]] = None
    clusters: Optional[List[str]] = None


class ViewportIn(BaseModel):
    x: float
    y: float
    width: float
    height: float
    zoom: float = 1.0


class OptimizeIn(BaseModel):
    viewport: ViewportIn
    mode: str = "auto"


class DeriveLinksIn(BaseModel):
    mode: str = "hybrid"


class ImportIn(BaseModel):
    document: str


# ============================================================================
# Helpers
# ============================================================================

def get_service(request: Request) -> GraphService:
    return request.app.state.service


def _require_data(service: GraphService) -> GraphData:
    data = service.get_data()
    if data is None:
        raise HTTPException(404, "No graph loaded")
    return data


def _filter_from(body: FilterIn) -> GraphFilter:
    return GraphFilter.from_dict(body.model_dump())


# ============================================================================
# Router
# ============================================================================

router = APIRouter(prefix="/api/v1/graph")


@router.get("")
def get_graph(service: GraphService = Depends(get_service)):
    return _require_data(service).to_dict()


@router.put("")
def put_graph(document: Dict[str, Any], service: GraphService = Depends(get_service)):
    try:
        data = GraphData.from_dict(document)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(422, f"Invalid graph document: {exc}")
    service.set_data(GraphData.build(data.nodes, data.links))
    return {"totalNodes": len(data.nodes), "totalLinks": len(data.links)}


@router.post("/nodes")
def add_node(node: Dict[str, Any], service: GraphService = Depends(get_service)):
    _require_data(service)
    try:
        data = service.add_node(GraphNode.from_dict(node))
    except DuplicateNodeError as exc:
        raise HTTPException(409, str(exc))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(422, f"Invalid node: {exc}")
    return {"totalNodes": len(data.nodes)}


@router.delete("/nodes/{node_id}")
def remove_node(node_id: str, service: GraphService = Depends(get_service)):
    if _require_data(service).get_node(node_id) is None:
        raise HTTPException(404, f"Node {node_id} not found")
    data = service.remove_node(node_id)
    return {"totalNodes": len(data.nodes), "totalLinks": len(data.links)}


@router.post("/links")
def add_link(link: Dict[str, Any], service: GraphService = Depends(get_service)):
    _require_data(service)
    try:
        data = service.add_link(GraphLink.from_dict(link))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(422, f"Invalid link: {exc}")
    return {"totalLinks": len(data.links)}


@router.delete("/links/{link_id}")
def remove_link(link_id: str, service: GraphService = Depends(get_service)):
    if _require_data(service).get_link(link_id) is None:
        raise HTTPException(404, f"Link {link_id} not found")
    data = service.remove_link(link_id)
    return {"totalLinks": len(data.links)}


@router.post("/links/derive")
def derive_links(body: DeriveLinksIn, service: GraphService = Depends(get_service)):
    _require_data(service)
    try:
        data = service.derive_links(body.mode)
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return {"totalLinks": len(data.links)}


@router.get("/algorithms")
def list_algorithms(service: GraphService = Depends(get_service)):
    return {
        "layouts": service.list_layouts(),
        "clusterings": service.list_clusterings(),
    }


@router.post("/layout/{name}")
def apply_layout(
    name: str,
    body: Optional[AlgorithmParams] = None,
    service: GraphService = Depends(get_service),
):
    try:
        data = service.apply_layout(name, body.params if body else None)
    except AlgorithmNotFoundError as exc:
        raise HTTPException(404, str(exc))
    if data is None:
        raise HTTPException(404, "No graph loaded")
    return data.to_dict()


@router.post("/clustering/{name}")
def apply_clustering(
    name: str,
    body: Optional[AlgorithmParams] = None,
    service: GraphService = Depends(get_service),
):
    try:
        data = service.apply_clustering(name, body.params if body else None)
    except AlgorithmNotFoundError as exc:
        raise HTTPException(404, str(exc))
    if data is None:
        raise HTTPException(404, "No graph loaded")
    return data.to_dict()


@router.get("/analytics")
def get_analytics(service: GraphService = Depends(get_service)):
    _require_data(service)
    return service.compute_analytics().to_dict()


@router.post("/filter")
def filter_graph(body: FilterIn, service: GraphService = Depends(get_service)):
    _require_data(service)
    try:
        flt = _filter_from(body)
    except ValueError as exc:
        raise HTTPException(422, f"Invalid filter: {exc}")
    return service.filter_data(flt).to_dict()


@router.post("/optimize")
def optimize(body: OptimizeIn, service: GraphService = Depends(get_service)):
    _require_data(service)
    vp = body.viewport
    try:
        result = service.optimize_view(
            Viewport(x=vp.x, y=vp.y, width=vp.width, height=vp.height, zoom=vp.zoom),
            body.mode,
        )
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return result.to_dict()


@router.get("/export", response_class=PlainTextResponse)
def export_graph(service: GraphService = Depends(get_service)):
    _require_data(service)
    return service.export_data()


@router.post("/import")
def import_graph(body: ImportIn, service: GraphService = Depends(get_service)):
    if not service.import_data(body.document):
        raise HTTPException(422, "Import failed; previous graph kept")
    data = service.get_data()
    return {"totalNodes": len(data.nodes), "totalLinks": len(data.links)}


# ============================================================================
# App factory
# ============================================================================

def create_app(service: Optional[GraphService] = None) -> FastAPI:
    app = FastAPI(title="notegraph API", version="0.1.0")
    app.state.service = service or GraphService.from_env()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        resp = await call_next(request)
        logger.info(
            "[http] %s %s -> %s (%d ms)",
            request.method,
            request.url.path,
            getattr(resp, "status_code", None),
            int((time.time() - start) * 1000),
        )
        return resp

    @app.get("/health")
    def health():
        return {"status": "ok", "time": time.time()}

    app.include_router(router)
    return app


__all__ = ["router", "create_app", "get_service"]
