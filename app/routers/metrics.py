from fastapi import APIRouter, Depends, Response

from app.metrics.registry import MetricsRegistry, get_metrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=Response)
async def read_metrics(metrics: MetricsRegistry = Depends(get_metrics)):
    """Prometheus text exposition of the process registry"""
    return Response(content=metrics.render(), media_type=metrics.content_type)
