"""Streamlit dashboard for SalesPulse."""

from __future__ import annotations

import io
import os
from typing import Any

import pandas as pd
import streamlit as st

from analytics.aggregation import compute_dashboard
from analytics.models import SalesRecord
from analytics.session import DashboardSession

st.set_page_config(page_title="SalesPulse", page_icon="SP", layout="wide")


@st.cache_resource(show_spinner=False)
def _load_backend_handles():
    """Load backend services lazily to keep startup lightweight."""
    from app.services.ai_analysis_service import AIAnalysisService  # noqa: PLC0415
    from app.services.dataset_service import DatasetService, build_anomaly_detector  # noqa: PLC0415
    from app.services.sales_export_service import SalesExportService  # noqa: PLC0415
    from app.services.sales_ingestion_service import SalesIngestionService  # noqa: PLC0415
    from db.session import session_scope  # noqa: PLC0415

    return {
        "session_scope": session_scope,
        "ingestion_service": SalesIngestionService,
        "dataset_service": DatasetService,
        "ai_service": AIAnalysisService,
        "exporter": SalesExportService(detector=build_anomaly_detector()),
    }


def _records_frame(records: list[SalesRecord]) -> pd.DataFrame:
    return pd.DataFrame([record.to_dict() for record in records])


def _rows_to_csv_bytes(rows: list[dict[str, Any]], fields: list[str]) -> bytes:
    buffer = io.StringIO()
    pd.DataFrame(rows, columns=fields).to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8")


def _load_dataset(user_id: str, dataset_name: str) -> None:
    handles = _load_backend_handles()
    with handles["session_scope"]() as db:
        records = handles["dataset_service"](db).load_records(user_id, dataset_name)
    session: DashboardSession = st.session_state.dashboard
    session.load(dataset_name, records)


def _list_datasets(user_id: str) -> list[str]:
    handles = _load_backend_handles()
    with handles["session_scope"]() as db:
        return [info.name for info in handles["dataset_service"](db).list_datasets(user_id)]


if "dashboard" not in st.session_state:
    st.session_state.dashboard = DashboardSession()
if "analysis" not in st.session_state:
    st.session_state.analysis = None
if "flash_error" not in st.session_state:
    st.session_state.flash_error = None

dashboard: DashboardSession = st.session_state.dashboard


with st.sidebar:
    st.header("Workspace")
    user_id = st.text_input("User", value=os.getenv("SALESPULSE_USER_ID", "demo-user")).strip()
    try:
        saved = _list_datasets(user_id) if user_id else []
    except Exception as exc:  # noqa: BLE001
        saved = []
        st.caption(f"Could not list datasets: {exc}")

    if saved:
        chosen = st.selectbox("Saved datasets", options=saved)
        if st.button("Load dataset", use_container_width=True):
            try:
                _load_dataset(user_id, chosen)
                st.session_state.analysis = None
            except Exception as exc:  # noqa: BLE001
                st.session_state.flash_error = f"Could not load dataset: {exc}"
            st.rerun()

    if st.button("Clear", use_container_width=True):
        dashboard.clear()
        st.session_state.analysis = None
        st.rerun()


st.title("SalesPulse")

if st.session_state.flash_error:
    st.error(st.session_state.flash_error)
    st.session_state.flash_error = None


# ---------------------------------------------------------------------------
# Section 1: Data
# ---------------------------------------------------------------------------

st.subheader("Section 1: Sales Data")
upload_tab, manual_tab, sample_tab = st.tabs(["Upload CSV", "Manual entry", "Sample data"])

with upload_tab:
    dataset_name = st.text_input("Dataset name", key="csv_dataset_name")
    uploaded_file = st.file_uploader("Upload CSV", type=["csv"])
    if uploaded_file is not None and st.button("Save CSV", type="primary"):
        handles = _load_backend_handles()
        try:
            with handles["session_scope"]() as db:
                result = handles["ingestion_service"](db).ingest_csv(
                    user_id=user_id,
                    stream=io.BytesIO(uploaded_file.getvalue()),
                    dataset_name=dataset_name,
                    file_name=uploaded_file.name,
                )
            dashboard.load(result.dataset_name, result.records)
            st.session_state.analysis = None
            st.success(f"Saved {result.records_saved} record(s) as {result.dataset_name!r}.")
        except Exception as exc:  # noqa: BLE001
            st.error(str(exc))

with manual_tab:
    manual_name = st.text_input(
        "Dataset name",
        value=dashboard.active_dataset or "",
        key="manual_dataset_name",
    )
    blank_rows = pd.DataFrame(
        [{"product_name": "", "category": "", "date_of_sale": "", "quantity_sold": "", "revenue": ""}] * 5
    )
    edited = st.data_editor(blank_rows, num_rows="dynamic", use_container_width=True)
    if st.button("Save rows"):
        handles = _load_backend_handles()
        rows = [{key: str(value) for key, value in row.items()} for row in edited.fillna("").to_dict("records")]
        try:
            with handles["session_scope"]() as db:
                result = handles["ingestion_service"](db).ingest_manual(
                    user_id=user_id,
                    rows=rows,
                    dataset_name=manual_name,
                )
            dashboard.load(result.dataset_name, result.records)
            st.session_state.analysis = None
            st.success(f"Dataset {result.dataset_name!r} now holds {result.records_saved} record(s).")
        except Exception as exc:  # noqa: BLE001
            st.error(str(exc))

with sample_tab:
    sample_days = st.slider("Days", min_value=7, max_value=365, value=90, step=1)
    if st.button("Generate sample data"):
        from analytics.sample_data import generate_sample_data  # noqa: PLC0415

        dashboard.load("Sample Data", generate_sample_data(days=sample_days))
        st.session_state.analysis = None
        st.rerun()


if not dashboard.records:
    st.info("Upload, enter or load sales data to view the dashboard.")
    st.stop()


# ---------------------------------------------------------------------------
# Section 2: Filters and overview
# ---------------------------------------------------------------------------

st.subheader(f"Section 2: Dashboard ({dashboard.active_dataset})")
all_records = list(dashboard.records)
categories = sorted({record.category for record in all_records})
products = sorted({record.product_name for record in all_records})

fcol1, fcol2, fcol3, fcol4 = st.columns(4)
with fcol1:
    date_from = st.text_input("From (YYYY-MM-DD)", value=dashboard.filter_state.date_from or "")
with fcol2:
    date_to = st.text_input("To (YYYY-MM-DD)", value=dashboard.filter_state.date_to or "")
with fcol3:
    category = st.selectbox("Category", options=["", *categories])
with fcol4:
    product = st.selectbox("Product", options=["", *products])

dashboard.set_filter(
    date_from=date_from or None,
    date_to=date_to or None,
    category=category or None,
    product=product or None,
)
records = dashboard.filtered()
snapshot = compute_dashboard(records)
stats = snapshot.stats

mcol1, mcol2, mcol3, mcol4, mcol5 = st.columns(5)
mcol1.metric("Total Revenue", f"{stats.total_revenue:,.2f}")
mcol2.metric("Units Sold", f"{stats.total_sales:,}")
mcol3.metric("Products", stats.total_products)
mcol4.metric("Avg Order Value", f"{stats.avg_order_value:,.2f}")
mcol5.metric("Top Product", stats.top_product)

if snapshot.time_series:
    series = pd.DataFrame([point.to_dict() for point in snapshot.time_series]).set_index("date")
    st.line_chart(series[["revenue"]])
if snapshot.categories:
    category_frame = pd.DataFrame([c.to_dict() for c in snapshot.categories]).set_index("category")
    st.bar_chart(category_frame[["total_revenue"]])

st.markdown("**Products**")
st.dataframe(pd.DataFrame([p.to_dict() for p in snapshot.products]), use_container_width=True)

with st.expander("Records"):
    st.dataframe(_records_frame(records), use_container_width=True)


# ---------------------------------------------------------------------------
# Section 3: Anomalies and AI analysis
# ---------------------------------------------------------------------------

st.subheader("Section 3: Alerts and Insights")
handles = _load_backend_handles()
alerts = handles["exporter"].export(records, kind="anomalies").rows
if alerts:
    for alert in alerts:
        st.warning(alert["Alert"])
else:
    st.caption("No anomalies detected.")

if st.button("Run AI analysis", type="primary"):
    with st.spinner("Analyzing sales data..."):
        try:
            st.session_state.analysis = handles["ai_service"]().analyze(records)
        except Exception as exc:  # noqa: BLE001
            st.session_state.analysis = None
            st.error(str(exc))

analysis = st.session_state.analysis
if analysis is not None:
    st.markdown(f"**Summary:** {analysis.summary}")
    for section in ("trends", "patterns", "predictions", "risks", "insights"):
        items = getattr(analysis, section)
        if items:
            st.markdown(f"**{section.title()}**")
            for item in items:
                st.markdown(f"- {item}")


# ---------------------------------------------------------------------------
# Section 4: Export
# ---------------------------------------------------------------------------

st.subheader("Section 4: Export")
dcol1, dcol2, dcol3 = st.columns(3)
for column, kind, label in (
    (dcol1, "products", "Download products CSV"),
    (dcol2, "sales", "Download sales CSV"),
    (dcol3, "categories", "Download categories CSV"),
):
    export = handles["exporter"].export(records, kind=kind)
    with column:
        st.download_button(
            label=label,
            data=_rows_to_csv_bytes(export.rows, export.fields),
            file_name=f"{kind}.csv",
            mime="text/csv",
            use_container_width=True,
        )

if analysis is not None:
    insights_export = handles["exporter"].export_ai_insights(analysis)
    st.download_button(
        label="Download AI insights CSV",
        data=_rows_to_csv_bytes(insights_export.rows, insights_export.fields),
        file_name="ai-insights.csv",
        mime="text/csv",
    )
