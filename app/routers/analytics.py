"""Working-set analytics computation router.

Provides analytics endpoints:
- POST /api/analytics/stats - Aggregate dimension statistics
- POST /api/analytics/box-plot - Box plot statistics grouped by series or family
- POST /api/analytics/box-plot/aggregate - One box plot over the whole working set
- POST /api/analytics/outliers - Z-score outliers per dimension
- POST /api/analytics/bias - Working-set bias findings
- POST /api/analytics/zones - Inspection zone aggregate
- POST /api/analytics/zones/faces/{face} - Zone aggregate for one face
- POST /api/analytics/envelope - Worst-case envelope
- POST /api/analytics/histogram - Histogram bins for one dimension
- POST /api/analytics/distribution - Per-series distribution bars for every dimension
- POST /api/analytics/summary - Statistics and envelope together
"""

import logging
from functools import partial
from typing import Any, Callable, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic_core import to_jsonable_python

from app.models.analytics import (
    AggregateBoxPlot,
    AggregateStatistics,
    BoxPlotFamilyStats,
    BoxPlotSeriesStats,
    CombinedBiasResult,
    DimensionalDistribution,
    EnvelopeResult,
    FaceAggregation,
    HistogramDimensionData,
    OutlierReport,
    StatsEnvelopeSummary,
    ZoneAggregation,
)
from app.models.parts import AggregateDimension, AnalysisRequest, Dimension, InspectionFace
from app.services.background import AnalysisWorker
from app.services.bias import detect_bias
from app.services.box_plot import (
    calculate_aggregate_box_plot,
    calculate_all_family_box_plot_stats,
    calculate_all_series_box_plot_stats,
)
from app.services.dispatcher import CalculationError, ComputationDispatcher
from app.services.envelope import calculate_envelope
from app.services.histogram import (
    DEFAULT_BIN_COUNT,
    calculate_dimension_histogram,
    calculate_dimensional_distribution,
)
from app.services.outliers import build_outlier_report
from app.services.statistics import calculate_aggregate_stats
from app.services.working_set import calculate_summary, select_working_set
from app.services.zones import aggregate_by_face, aggregate_zones

logger = logging.getLogger(__name__)

router = APIRouter()


def get_analysis_worker(request: Request) -> AnalysisWorker:
    """Application-wide analysis worker, created on first use."""
    worker = getattr(request.app.state, "analysis_worker", None)
    if worker is None or not worker.is_alive():
        worker = AnalysisWorker()
        request.app.state.analysis_worker = worker
    return worker


async def _run(
    data: AnalysisRequest,
    worker: AnalysisWorker,
    calculate: Callable[[Any], Any],
    kind: str,
    result_type: Any,
    **payload_extras: Any,
) -> JSONResponse:
    parts = select_working_set(data.parts, data.working_set)
    dispatcher = ComputationDispatcher(
        calculate,
        kind,
        result_type,
        worker=worker,
        payload_extras=payload_extras,
    )

    try:
        result = await run_in_threadpool(dispatcher.compute, parts)

        return JSONResponse(
            status_code=200,
            content={
                "status": "success",
                "data": to_jsonable_python(result),
            },
        )

    except CalculationError as e:
        # Already logged with traceback by the dispatcher
        logger.warning(f"Analytics {kind} failed for {len(parts)} parts: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": {
                    "code": "CALCULATION_ERROR",
                    "message": f"Could not calculate {kind}. Please check the data and try again.",
                },
            },
        )


@router.post(
    "/stats",
    response_model=None,
    summary="Aggregate statistics of the working set",
    description="""
    Count, min, max, mean, median and population standard deviation for
    width, height, length and the smallest lateral and depth features.

    `std_dev` is `null` for fewer than 2 values. `smallest_depth_feature`
    covers only parts that define one and is `null` when none do.
    """,
)
async def compute_stats(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, calculate_aggregate_stats, "stats", AggregateStatistics)


@router.post(
    "/box-plot",
    response_model=None,
    summary="Box plot statistics grouped by series or family",
    description="""
    Quartiles (linear interpolation), Tukey whiskers and 1.5×IQR outliers per
    group, sorted alphabetically by group name. Parts without a series are
    grouped as `Uncategorized`, parts without a family as `Unassigned`.
    """,
)
async def compute_box_plot(
    data: AnalysisRequest,
    dimension: Dimension = Query(default="width"),
    group_by: Literal["series", "family"] = Query(default="series"),
    worker: AnalysisWorker = Depends(get_analysis_worker),
) -> JSONResponse:
    if group_by == "family":
        return await _run(
            data,
            worker,
            partial(calculate_all_family_box_plot_stats, dimension=dimension),
            "box-plot-family",
            list[BoxPlotFamilyStats],
            dimension=dimension,
        )
    return await _run(
        data,
        worker,
        partial(calculate_all_series_box_plot_stats, dimension=dimension),
        "box-plot-series",
        list[BoxPlotSeriesStats],
        dimension=dimension,
    )


@router.post(
    "/box-plot/aggregate",
    response_model=None,
    summary="Box plot over the whole working set",
    description="""
    A single box plot across every selected part for one dimension or
    feature size (`lateral`, `depth`). Returns `null` data for no parts, and
    for `depth` when no part defines a depth feature.
    """,
)
async def compute_aggregate_box_plot(
    data: AnalysisRequest,
    dimension: AggregateDimension = Query(default="width"),
    worker: AnalysisWorker = Depends(get_analysis_worker),
) -> JSONResponse:
    return await _run(
        data,
        worker,
        partial(calculate_aggregate_box_plot, dimension=dimension),
        "box-plot-aggregate",
        Optional[AggregateBoxPlot],
        dimension=dimension,
    )


@router.post(
    "/outliers",
    response_model=None,
    summary="Z-score outliers per dimension",
    description="Parts more than 2σ from the mean; requires at least 3 parts.",
)
async def compute_outliers(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, build_outlier_report, "outliers", OutlierReport)


@router.post(
    "/bias",
    response_model=None,
    summary="Working-set bias findings",
    description="""
    Advisory findings in fixed order: series dominance (>80%, warning),
    too few parts (1-2, info), outlier skew (first part beyond 2σ, info).
    """,
)
async def compute_bias(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, detect_bias, "bias", CombinedBiasResult)


@router.post(
    "/zones",
    response_model=None,
    summary="Inspection zone aggregate",
    description="Returns `null` data when no part has an inspection zone.",
)
async def compute_zones(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, aggregate_zones, "zones", Optional[ZoneAggregation])


@router.post(
    "/zones/faces/{face}",
    response_model=None,
    summary="Inspection zone aggregate for one face",
)
async def compute_face_zones(
    face: InspectionFace,
    data: AnalysisRequest,
    worker: AnalysisWorker = Depends(get_analysis_worker),
) -> JSONResponse:
    return await _run(
        data,
        worker,
        partial(aggregate_by_face, face=face),
        "face-zones",
        FaceAggregation,
        face=face,
    )


@router.post(
    "/envelope",
    response_model=None,
    summary="Worst-case envelope",
    description="Maximum of each axis and the first part reaching it; `null` for no parts.",
)
async def compute_envelope(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, calculate_envelope, "envelope", Optional[EnvelopeResult])


@router.post(
    "/histogram",
    response_model=None,
    summary="Histogram of one dimension",
)
async def compute_histogram(
    data: AnalysisRequest,
    dimension: Dimension = Query(default="width"),
    bin_count: int = Query(default=DEFAULT_BIN_COUNT, ge=1, le=100),
    worker: AnalysisWorker = Depends(get_analysis_worker),
) -> JSONResponse:
    return await _run(
        data,
        worker,
        partial(calculate_dimension_histogram, dimension=dimension, bin_count=bin_count),
        "histogram",
        HistogramDimensionData,
        dimension=dimension,
        bin_count=bin_count,
    )


@router.post(
    "/summary",
    response_model=None,
    summary="Aggregate statistics and envelope",
)
async def compute_summary(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(data, worker, calculate_summary, "summary", StatsEnvelopeSummary)


@router.post(
    "/distribution",
    response_model=None,
    summary="Per-series dimensional distribution",
    description="""
    Bars for width, height and length. Up to 20 parts get one bar per
    (value, series); larger working sets use 10 bins per series. Bars are
    flagged when they contain a z-score outlier.
    """,
)
async def compute_distribution(
    data: AnalysisRequest, worker: AnalysisWorker = Depends(get_analysis_worker)
) -> JSONResponse:
    return await _run(
        data, worker, calculate_dimensional_distribution, "distribution", DimensionalDistribution
    )
