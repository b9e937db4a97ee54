import streamlit as st
import pandas as pd
import altair as alt
import datetime as dt
import logging

from doctoral_credits.calculations import CreditReporter
from doctoral_credits.catalog import CATALOG, activity_keys
from doctoral_credits.config_manager import ConfigManager
from doctoral_credits.data_manager import DataManager
from doctoral_credits.exporter import build_export_frame, export_csv, export_filename
from doctoral_credits.logging_config import setup_logging
from doctoral_credits.schema import ActivityEntry, DayBased

# MUST be the first Streamlit command
st.set_page_config(
    page_title="Doctoral Credits Tracker",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded"
)

logger = logging.getLogger("doctoral_credits.app")

def inject_custom_css():
    st.markdown("""
        <style>
            @import url('https://fonts.googleapis.com/css2?family=Playfair+Display:wght@700&family=Inter:wght@400;600&family=JetBrains+Mono&display=swap');

            h1, h2, h3 {
                font-family: 'Playfair Display', serif !important;
                font-weight: 700;
                letter-spacing: 1px !important;
            }

            p, div, label, span {
                font-family: 'Inter', sans-serif;
            }

            /* Credit figures */
            [data-testid="stMetricValue"] {
                font-family: 'JetBrains Mono', monospace;
                color: #1d4ed8;
            }

            .stProgress > div > div > div > div {
                background-color: #1d4ed8;
            }

            button {
                border-radius: 0px !important;
                box-shadow: none !important;
            }

            #MainMenu {visibility: hidden;}
            footer {visibility: hidden;}
        </style>
    """, unsafe_allow_html=True)

inject_custom_css()

# =============================================================================
# CONFIG, LOGGING & STORAGE
# =============================================================================

def _tracker_secrets() -> dict:
    """Optional [tracker] table from .streamlit/secrets.toml."""
    try:
        return dict(st.secrets.get("tracker", {}))
    except Exception:
        # No secrets file at all
        return {}

if "config_manager" not in st.session_state:
    st.session_state["config_manager"] = ConfigManager(_tracker_secrets())

config_manager = st.session_state["config_manager"]
setup_logging(log_dir=config_manager.log_dir, level=config_manager.get("log_level", "INFO"))

@st.cache_resource
def get_reporter(ruleset: str) -> CreditReporter:
    return CreditReporter(ruleset=ruleset)

if "ledger" not in st.session_state:
    dm = DataManager(config_manager.storage_path, key=config_manager.get("storage_key"))
    st.session_state["dm"] = dm
    # Save-on-mutation: every add/delete rewrites the stored record
    st.session_state["ledger"] = dm.load_ledger(on_change=dm.save_ledger)

dm = st.session_state["dm"]
ledger = st.session_state["ledger"]
reporter = get_reporter(config_manager.get("ruleset", "standard"))

def _apply(mutation, *args):
    """Runs a ledger mutation, surfacing storage failures instead of crashing the page."""
    try:
        return mutation(*args)
    except OSError as e:
        logger.error("Could not save ledger to %s: %s", dm.path, e)
        st.error(f"Change kept for this session but could not be saved: {e}")
        return None

# =============================================================================
# PAGES
# =============================================================================

st.sidebar.title("🎓 Doctoral Credits")
page = st.sidebar.radio("Go to", ["Ledger", "Import Data", "Export", "Help"])
st.sidebar.caption(f"Storage: `{dm.path}`")

if page == "Ledger":
    st.markdown("# 📚 Credit Ledger")

    stats = reporter.calculate_stats(ledger)

    # 1. Metrics
    col_m1, col_m2, col_m3 = st.columns(3)
    col_m1.metric("Training Credits", f"{stats.training_credits:.1f} / {stats.training_cap:.0f}",
                  delta=f"{stats.training_progress:.1f}%", delta_color="off")
    col_m2.metric("Total Credits", f"{stats.total_credits:.1f} / {stats.total_cap:.0f}",
                  delta=f"{stats.total_progress:.1f}%", delta_color="off")
    col_m3.metric("Research Credits", f"{stats.research_credits:.0f}")

    # 2. Progress bars (percentages already capped at 100)
    st.caption("Training credits")
    st.progress(max(0.0, stats.training_progress) / 100)
    st.caption("Total credits")
    st.progress(max(0.0, stats.total_progress) / 100)

    if stats.exceeds_training_cap:
        st.warning(f"⚠️ Training credits exceed maximum of {stats.training_cap:.0f} CD "
                   f"({stats.training_credits:.1f} CD logged).")

    # 3. Credits per type
    chart_df = pd.DataFrame({
        "Activity": [CATALOG[k].name for k in activity_keys()],
        "Credits": [stats.credits_by_type[k] for k in activity_keys()],
    })
    if chart_df["Credits"].sum() > 0:
        credits_chart = alt.Chart(chart_df).mark_bar(color="#1d4ed8").encode(
            x=alt.X("Credits:Q", axis=alt.Axis(title="Credits (CD)")),
            y=alt.Y("Activity:N", sort=None, axis=alt.Axis(title=None)),
            tooltip=[
                alt.Tooltip("Activity:N"),
                alt.Tooltip("Credits:Q", format=".1f"),
            ]
        ).properties(height=260)
        st.altair_chart(credits_chart, width="stretch")

    st.markdown("---")

    # 4. One section per activity type
    entries_df = ledger.to_dataframe()
    for key in activity_keys():
        definition = CATALOG[key]
        aggregate = ledger.aggregate(key)
        day_based = isinstance(definition, DayBased)

        with st.expander(f"{definition.name}: {ledger.credits_for(key):.1f} CD ({len(aggregate.entries)} entries)"):
            if day_based:
                st.caption(f"{definition.credit_per_day} CD per day attended. "
                           f"Total days: {aggregate.days_total:g}")
            else:
                st.caption(f"1 unit = {definition.classroom_hours_per_unit:g}h classroom + "
                           f"{definition.autonomous_hours_per_unit:g}h autonomous study "
                           f"({definition.credit_per_unit:g} CD). "
                           f"Totals: {aggregate.classroom_total:g}h classroom, "
                           f"{aggregate.autonomous_total:g}h autonomous")

            with st.form(key=f"add_{key}", clear_on_submit=True):
                c1, c2, c3 = st.columns(3)
                with c1:
                    title_input = st.text_input("Title", key=f"title_{key}")
                with c2:
                    date_from_input = st.date_input("Date From", value=dt.date.today(), key=f"from_{key}")
                with c3:
                    date_to_input = st.date_input("Date To (optional)", value=None, key=f"to_{key}")

                if day_based:
                    days_input = st.text_input("Days attended", value="0", key=f"days_{key}")
                    classroom_input = autonomous_input = None
                else:
                    c4, c5 = st.columns(2)
                    with c4:
                        classroom_input = st.text_input("Classroom hours", value="0", key=f"classroom_{key}")
                    with c5:
                        autonomous_input = st.text_input("Autonomous hours", value="0", key=f"autonomous_{key}")
                    days_input = None

                if st.form_submit_button("Add Entry"):
                    entry = ActivityEntry.from_form(
                        title=title_input,
                        date_from=date_from_input,
                        date_to=date_to_input,
                        classroom_hours=classroom_input,
                        autonomous_hours=autonomous_input,
                        days=days_input,
                    )
                    if _apply(ledger.add_entry, key, entry) is not None:
                        st.rerun()

            type_rows = entries_df[entries_df["activity_type"] == key]
            for _, row in type_rows.iterrows():
                c_row1, c_row2, c_row3 = st.columns([4, 1, 1])
                with c_row1:
                    period = row["date_from"].isoformat() if pd.notna(row["date_from"]) else "no start date"
                    if pd.notna(row["date_to"]):
                        period += f" → {row['date_to'].isoformat()}"
                    if day_based:
                        days = row["days"] if pd.notna(row["days"]) else 0
                        detail = f"{days:g} days"
                    else:
                        detail = f"{row['classroom_hours']:g}h classroom / {row['autonomous_hours']:g}h autonomous"
                    st.write(f"**{row['title']}** · {period} · {detail}")
                with c_row2:
                    st.write(f"{row['credits']:.1f} CD")
                with c_row3:
                    if st.button("Delete", key=f"del_{row['uid']}", width="stretch"):
                        _apply(ledger.delete_entry, key, row["uid"])
                        st.rerun()

elif page == "Import Data":
    st.markdown("# 📥 Import Entries")
    st.markdown("Upload a CSV previously exported from this tracker.")

    uploaded_file = st.file_uploader("Choose a CSV file", type=['csv'])

    if uploaded_file is not None:
        try:
            from doctoral_credits.importer import credit_mismatches, entries_from_frame, import_into, read_export

            with st.spinner('Processing file...'):
                df = read_export(uploaded_file)
                pairs = entries_from_frame(df)
                mismatched = credit_mismatches(df)

            st.success(f"Processing Complete! Found {len(pairs)} rows with a known activity type.")
            if mismatched:
                st.warning(f"⚠️ {mismatched} rows list credits that differ from the value recomputed "
                           "from their hours or days. Exported hours are rounded to whole numbers, "
                           "so the imported entries will carry the recomputed credits.")

            with st.expander("Preview Data", expanded=True):
                st.dataframe(df.head(10))

            if st.button("Confirm Import"):
                accepted = _apply(import_into, ledger, df)
                if accepted is not None:
                    st.toast(f"Imported {accepted} entries", icon="💾")
                    st.rerun()

        except ValueError as e:
            st.error(f"Error processing file: {e}")

elif page == "Export":
    st.markdown("# 📤 Export")

    export_df = build_export_frame(ledger)
    st.info(f"{len(export_df)} entries across {len(activity_keys())} activity types.")
    st.dataframe(export_df, hide_index=True, width="stretch")

    st.download_button(
        label="⬇️ Download CSV",
        data=export_csv(ledger),
        file_name=export_filename(),
        mime="text/csv",
        disabled=export_df.empty,
    )

elif page == "Help":
    st.markdown("# ❓ How credits are counted")

    with st.expander("Hour-based activities", expanded=True):
        st.markdown("""
        Each unit requires both classroom and autonomous hours. Credits are the
        **smaller** of the two ratios (classroom / required, autonomous / required),
        so a surplus in one cannot make up for a deficit in the other.
        Partial units count, rounded to one decimal.
        """)

    with st.expander("Day-based activities"):
        st.markdown("Extra-curricular activities and dissemination earn **0.5 CD per day**.")

    with st.expander("Thresholds"):
        st.markdown(f"""
        * Training credits are shown against **{reporter.training_cap:.0f} CD**; logging more is
          allowed but flagged.
        * Total credits add **{reporter.research_credits:.0f} CD** of research and are shown
          against **{reporter.total_cap:.0f} CD**.
        """)

    st.markdown("### 📚 Glossary")
    st.dataframe({
        "Term": ["Credit (CD)", "Unit", "Training credits", "Total credits"],
        "Definition": [
            "Fractional unit of completed training progress.",
            "One set of the classroom + autonomous hours an activity type requires.",
            "Sum of credits over the eight activity types.",
            "Training credits plus the fixed research component.",
        ]
    }, hide_index=True, width="stretch")

    st.markdown("### ⚙️ Settings")
    st.caption("Set in the `[tracker]` table of `.streamlit/secrets.toml` or as `DOCTORAL_CREDITS_<SETTING>` environment variables.")
    all_config = config_manager.get_all_config()
    st.dataframe({
        "Setting": list(all_config),
        "Value": [str(v) for v in all_config.values()],
    }, hide_index=True, width="stretch")

    st.markdown("---")
    if st.button("Reset stored ledger"):
        dm.clear()
        del st.session_state["ledger"]
        st.rerun()
