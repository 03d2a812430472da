"""
Streamlit UI for the Concrete Estimator - live preview.

Features:
- Concrete class presets or a custom mix ratio
- Density, dry factor and wastage overrides
- Live bill of materials from the same engine the API uses
- Calculation trace
- Export to CSV/JSON
"""
import json
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from concrete_estimator.engine import EstimationEngine, InvalidInput, get_preset_mix_ratios, validate_estimation_input
from concrete_estimator.engine.presets import DEFAULT_CONCRETE_CLASS, DEFAULT_DENSITIES
from concrete_estimator.services.export_service import (
    ExportOptions,
    format_estimation_results,
    generate_csv_export,
    generate_json_export,
    get_export_filename,
    to_dataframe,
)


st.set_page_config(
    page_title="Concrete Estimator",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return EstimationEngine()


try:
    engine = get_engine()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# CUSTOM CSS & STYLING
# ============================================================================
st.markdown("""
    <style>
        .block-container {
            padding-top: 2rem;
            padding-bottom: 2rem;
        }
        .stMetric {
            background-color: #f0f2f6;
            padding: 10px;
            border-radius: 5px;
            border-left: 5px solid #8a8f98;
        }
    </style>
""", unsafe_allow_html=True)

# ============================================================================
# SIDEBAR: Pour Parameters
# ============================================================================
presets = get_preset_mix_ratios()

with st.sidebar:
    st.header("🧱 Pour Parameters")

    with st.container(border=True):
        project_name = st.text_input("Project Name", value="New Pour")
        location = st.text_input("Location", value="")
        volume_m3 = st.number_input("Volume (m³)", min_value=0.0, value=10.0, step=0.5, format="%.3f")

    with st.container(border=True):
        class_options = list(presets.keys()) + ["Custom"]
        concrete_class = st.selectbox(
            "Concrete Class",
            options=class_options,
            index=class_options.index(DEFAULT_CONCRETE_CLASS),
        )
        preset = presets.get(concrete_class)

        c1, c2, c3 = st.columns(3)
        cement_parts = c1.number_input("Cement", min_value=0.0, value=float(preset.cement if preset else 1.0),
                                       step=0.1, disabled=preset is not None)
        sand_parts = c2.number_input("Sand", min_value=0.0, value=float(preset.sand if preset else 2.0),
                                     step=0.1, disabled=preset is not None)
        aggregate_parts = c3.number_input("Aggregate", min_value=0.0, value=float(preset.aggregate if preset else 4.0),
                                          step=0.1, disabled=preset is not None)

    with st.expander("⚙️ Advanced"):
        cement_density = st.number_input("Cement density (kg/m³)", min_value=0.0, value=DEFAULT_DENSITIES.cement)
        sand_density = st.number_input("Sand density (kg/m³)", min_value=0.0, value=DEFAULT_DENSITIES.sand)
        aggregate_density = st.number_input("Aggregate density (kg/m³)", min_value=0.0, value=DEFAULT_DENSITIES.aggregate)
        dry_factor = st.number_input("Dry volume factor", min_value=0.0, max_value=3.0,
                                     value=engine.settings.default_dry_factor, step=0.01)
        wastage_factor = st.slider("Wastage (%)", min_value=0.0, max_value=50.0,
                                   value=engine.settings.default_wastage_factor, step=0.5)

    st.divider()
    costs = engine.unit_costs
    st.caption(
        f"Unit costs: ${costs.cement_per_bag:.2f}/bag · "
        f"${costs.sand_per_tonne:.2f}/t sand · ${costs.aggregate_per_tonne:.2f}/t aggregate"
    )


payload = {
    "volumeM3": volume_m3,
    "mixRatio": {"cement": cement_parts, "sand": sand_parts, "aggregate": aggregate_parts},
    "densities": {"cement": cement_density, "sand": sand_density, "aggregate": aggregate_density},
    "dryFactor": dry_factor,
    "wastageFactor": wastage_factor,
}

# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Concrete Material Estimator")
st.caption(f"Volumetric mix method | Preview | {datetime.now().strftime('%Y-%m-%d')}")

errors = validate_estimation_input(payload)
if errors:
    for error in errors:
        st.warning(error)

result = None
try:
    result = engine.estimate_from_dict(payload)
except (InvalidInput, KeyError, TypeError, ValueError) as e:
    st.info(f"Adjust the parameters to see a preview ({e})")

if result is not None:
    formatted = format_estimation_results(result)

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Cement", f"{result.cement.bags} bags")
    m2.metric("Sand", f"{result.sand.tonnes:,.3f} t")
    m3.metric("Aggregate", f"{result.aggregate.tonnes:,.3f} t")
    m4.metric("Estimated Cost", f"${result.totals.estimated_cost:,.2f}")

    st.divider()
    col1, col2 = st.columns([1.8, 1.2], gap="large")

    with col1:
        st.subheader("Bill of Materials")
        st.dataframe(to_dataframe(result), use_container_width=True, hide_index=True)

    with col2:
        st.subheader("Summary")
        with st.container(border=True):
            st.markdown(f"**Mix:** {formatted['parameters']['mixRatio']}")
            st.markdown(f"**Dry volume:** {formatted['totals']['volume']}")
            st.markdown(f"**Total mass:** {formatted['totals']['mass']}")
            st.markdown(f"**Wastage:** {formatted['parameters']['wastageFactor']}")

            options = ExportOptions(project_name=project_name or "Project", location=location or None)
            btn_col1, btn_col2 = st.columns(2)
            with btn_col1:
                st.download_button(
                    "📥 CSV",
                    data=generate_csv_export(result, options),
                    file_name=get_export_filename(options.project_name, "csv", options.date),
                    mime="text/csv",
                    use_container_width=True
                )
            with btn_col2:
                st.download_button(
                    "📥 JSON",
                    data=json.dumps(generate_json_export(result, options), indent=2),
                    file_name=get_export_filename(options.project_name, "json", options.date),
                    mime="application/json",
                    use_container_width=True
                )

    with st.expander("🔍 Calculation Details"):
        for step in result.trace:
            if step.value:
                st.caption(f"**{step.step}**: {step.description} = `{step.value}`")
            else:
                st.caption(f"**{step.step}**: {step.description}")

    with st.expander("📋 Preset Classes"):
        st.dataframe(
            pd.DataFrame([
                {'Class': label, 'Mix': ratio.as_text(), 'Cement': ratio.cement,
                 'Sand': ratio.sand, 'Aggregate': ratio.aggregate}
                for label, ratio in presets.items()
            ]),
            use_container_width=True,
            hide_index=True
        )
