"""
app/api/routers/export.py

Dataset export endpoint.

GET /datasets/{dataset_name}/export

Query parameters
----------------
kind          : "products" | "sales" | "categories" | "anomalies" | "ai_insights"
                (default: "products")
format        : "csv" | "json"   (default: "csv")
date_from, date_to, category, product : optional view filter

Responses
---------
CSV  → StreamingResponse, Content-Type: text/csv
       Content-Disposition: attachment; filename=<kind>.csv
JSON → JSONResponse
       Body: {"kind": str, "rows": int, "fields": list[str], "data": list[dict]}
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from analytics.models import FilterState
from app.api.dependencies import (
    get_ai_analysis_service,
    get_current_user_id,
    get_dataset_service,
    get_filter_state,
    get_sales_export_service,
)
from app.services.ai_analysis_service import AIAnalysisService
from app.services.dataset_service import DatasetNotFoundError, DatasetService
from app.services.sales_export_service import VALID_KINDS, ExportResult, SalesExportService
from llm_synthesis.adapter import LLMServiceError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])

_VALID_FORMATS = frozenset({"csv", "json"})
_FILENAMES = {
    "products": "product-performance.csv",
    "sales": "sales-data.csv",
    "categories": "category-performance.csv",
    "anomalies": "anomalies.csv",
    "ai_insights": "ai-insights.csv",
}


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _to_csv_streaming(result: ExportResult, filename: str) -> StreamingResponse:
    """Stream *result* as a UTF-8 CSV file download."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_json_response(result: ExportResult, kind: str) -> JSONResponse:
    return JSONResponse(
        content={
            "kind": kind,
            "rows": len(result.rows),
            "fields": result.fields,
            "data": result.rows,
        }
    )


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@router.get(
    "/datasets/{dataset_name}/export",
    summary="Export a dataset view",
    response_model=None,
)
def export_dataset(
    dataset_name: str,
    kind: str = Query(default="products", description="Which view to export."),
    output_format: str = Query(default="csv", alias="format", description='"csv" or "json".'),
    filter_state: FilterState = Depends(get_filter_state),
    user_id: str = Depends(get_current_user_id),
    datasets: DatasetService = Depends(get_dataset_service),
    exporter: SalesExportService = Depends(get_sales_export_service),
    ai_service: AIAnalysisService = Depends(get_ai_analysis_service),
) -> StreamingResponse | JSONResponse:
    if kind not in VALID_KINDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid kind {kind!r}. Must be one of: {sorted(VALID_KINDS)}.",
        )
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )

    try:
        records = datasets.load_filtered(user_id, dataset_name, filter_state)
        if kind == "ai_insights":
            result = exporter.export_ai_insights(ai_service.analyze(records))
        else:
            result = exporter.export(records, kind=kind)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LLMServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    logger.info(
        "Export dataset=%r kind=%r format=%r rows=%d",
        dataset_name,
        kind,
        output_format,
        len(result.rows),
    )

    if output_format == "csv":
        return _to_csv_streaming(result, _FILENAMES[kind])
    return _to_json_response(result, kind)
