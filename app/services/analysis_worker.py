"""Message routing for background analysis calculations.

Maps a payload "kind" to the pure calculation that serves it. Payloads and
results are plain JSON-compatible structures so they can cross the worker
channel as serialized messages.

Adding a calculation:
    1. Write the pure function in app/services/
    2. Register it in CALCULATIONS below under a new kind
    3. Build a ComputationDispatcher with that kind and its result type
"""

from typing import Any, Callable

from pydantic_core import to_jsonable_python

from app.models.parts import Part
from app.services.bias import detect_bias
from app.services.box_plot import (
    calculate_aggregate_box_plot,
    calculate_all_family_box_plot_stats,
    calculate_all_series_box_plot_stats,
)
from app.services.envelope import calculate_envelope
from app.services.histogram import (
    DEFAULT_BIN_COUNT,
    calculate_dimension_histogram,
    calculate_dimensional_distribution,
)
from app.services.outliers import build_outlier_report
from app.services.statistics import calculate_aggregate_stats
from app.services.working_set import calculate_summary
from app.services.zones import aggregate_by_face, aggregate_zones


def _parts(payload: dict[str, Any]) -> list[Part]:
    return [Part.model_validate(p) for p in payload["parts"]]


CALCULATIONS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "stats": lambda payload: calculate_aggregate_stats(_parts(payload)),
    "box-plot-series": lambda payload: calculate_all_series_box_plot_stats(
        _parts(payload), payload["dimension"]
    ),
    "box-plot-family": lambda payload: calculate_all_family_box_plot_stats(
        _parts(payload), payload["dimension"]
    ),
    "box-plot-aggregate": lambda payload: calculate_aggregate_box_plot(
        _parts(payload), payload["dimension"]
    ),
    "outliers": lambda payload: build_outlier_report(_parts(payload)),
    "bias": lambda payload: detect_bias(_parts(payload)),
    "zones": lambda payload: aggregate_zones(_parts(payload)),
    "face-zones": lambda payload: aggregate_by_face(_parts(payload), payload["face"]),
    "envelope": lambda payload: calculate_envelope(_parts(payload)),
    "histogram": lambda payload: calculate_dimension_histogram(
        _parts(payload),
        payload["dimension"],
        payload.get("bin_count", DEFAULT_BIN_COUNT),
    ),
    "summary": lambda payload: calculate_summary(_parts(payload)),
    "distribution": lambda payload: calculate_dimensional_distribution(_parts(payload)),
}


def handle_message(payload: dict[str, Any]) -> Any:
    """Run the calculation named by payload["kind"] and return a JSON-ready result.

    Raises:
        ValueError: If the kind is not registered
    """
    kind = payload.get("kind")
    calculation = CALCULATIONS.get(kind)
    if calculation is None:
        raise ValueError(f"Unknown calculation type: {kind}")
    return to_jsonable_python(calculation(payload))
