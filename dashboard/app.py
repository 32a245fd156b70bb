"""
NPU Simulator — Interactive Streamlit Dashboard
================================================
Launch with:
    streamlit run dashboard/app.py

Requires:
    pip install -e ".[dashboard]"
    (installs streamlit and plotly in addition to core dependencies)
"""
from __future__ import annotations

import pandas as pd
import plotly.express as px
import streamlit as st

from npu_sim.sim.engine import SimEngine
from npu_sim.strategy.registry import STRATEGIES, make_strategy
from npu_sim.workloads.synthetic import WorkloadConfig, generate_synthetic

st.set_page_config(
    page_title="NPU Simulator",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────
LABELS = {
    "first_fit":    "First-Fit",
    "best_fit":     "Best-Fit",
    "least_loaded": "Least-Loaded",
    "round_robin":  "Round-Robin",
    "priority":     "Priority Hybrid",
}

COLORS = {
    "First-Fit":       "#2196F3",
    "Best-Fit":        "#F44336",
    "Least-Loaded":    "#4CAF50",
    "Round-Robin":     "#00BCD4",
    "Priority Hybrid": "#9C27B0",
}


# ──────────────────────────────────────────────────────────────────────────────
# Simulation runner (cached so re-renders don't re-run the sim)
# ──────────────────────────────────────────────────────────────────────────────
@st.cache_data(show_spinner=False)
def run_simulation(
    strategy_key: str,
    npu_count: int,
    n_tasks: int,
    arrival_rate: float,
    seed: int,
) -> dict:
    cfg = WorkloadConfig(n_tasks=n_tasks, arrival_rate=arrival_rate, seed=seed)
    engine = SimEngine(npu_count, make_strategy(strategy_key))
    engine.submit_all(generate_synthetic(cfg))
    snap = engine.run()
    stats = snap.simulation_statistics

    # one row per (task, NPU) so the timeline shows NPU occupancy
    records = []
    for a in engine.allocation_history:
        finish = a.start_time + a.task.duration
        for npu_id in a.npu_ids:
            records.append({
                "task_id": a.task.task_id,
                "npu_id":  npu_id,
                "start":   a.start_time.to_seconds(),
                "finish":  finish.to_seconds(),
                "wait":    round((a.start_time - a.task.arrival_time).to_seconds(), 3),
                "demand":  a.task.npu_demand,
                "compute": round(a.task.compute_ratio, 3),
                "memory":  round(a.task.memory_ratio, 3),
            })

    p95 = stats.response_time_percentile(95)
    return {
        "strategy":      LABELS[strategy_key],
        "compute_util":  stats.compute_utilization(npu_count),
        "memory_util":   stats.memory_utilization(npu_count),
        "avg_response":  stats.average_response_time().to_seconds(),
        "p95_response":  p95.to_seconds() if p95 is not None else 0.0,
        "avg_wait":      stats.average_wait_time().to_seconds(),
        "completed":     stats.completed_tasks,
        "responses":     [r.to_seconds() for r in stats.response_times],
        "task_df":       pd.DataFrame(records),
        "sim_end":       snap.current_time.to_seconds(),
    }


# ──────────────────────────────────────────────────────────────────────────────
# Sidebar: configuration controls
# ──────────────────────────────────────────────────────────────────────────────
with st.sidebar:
    st.title("NPU Simulator")
    st.caption("NPU Load-Balancing Discrete-Event Simulator")
    st.divider()

    st.subheader("Pool")
    npu_count = st.slider("NPUs", min_value=2, max_value=32, value=8, step=1)

    st.subheader("Workload")
    n_tasks      = st.slider("Number of Tasks", 10, 500, 50, step=10)
    arrival_rate = st.slider("Arrival Rate (tasks/s)", 0.05, 2.0, 0.2, step=0.05)
    seed         = st.number_input("Random Seed", min_value=0, max_value=9999, value=42)

    st.subheader("Strategies to Compare")
    selected = []
    defaults = {"first_fit", "least_loaded", "priority"}
    for key in STRATEGIES:
        if st.checkbox(LABELS[key], value=(key in defaults)):
            selected.append(key)

    st.divider()
    run_btn = st.button("Run Simulation", type="primary", use_container_width=True)

# ──────────────────────────────────────────────────────────────────────────────
# Main area
# ──────────────────────────────────────────────────────────────────────────────
st.title("NPU Simulator — Allocation Strategy Dashboard")

if not run_btn:
    st.info("Configure the experiment in the sidebar, then click **Run Simulation**.")
    st.stop()

if not selected:
    st.warning("Select at least one strategy in the sidebar.")
    st.stop()

results = []
prog = st.progress(0, text="Starting simulations...")
for i, key in enumerate(selected):
    prog.progress((i + 1) / len(selected), text=f"Running {LABELS[key]}...")
    results.append(run_simulation(key, npu_count, n_tasks, arrival_rate, int(seed)))
prog.empty()

tab_results, tab_timeline, tab_data = st.tabs(["Results", "NPU Timeline", "Raw Data"])

# ── Tab 1: Results ────────────────────────────────────────────────────────────
with tab_results:
    cols = st.columns(len(results))
    for col, r in zip(cols, results):
        with col:
            st.markdown(f"**{r['strategy']}**")
            st.metric("Compute Utilization", f"{r['compute_util']:.1%}")
            st.metric("Avg Response (s)",    f"{r['avg_response']:.2f}")
            st.metric("Avg Wait (s)",        f"{r['avg_wait']:.2f}")
            st.metric("Tasks Completed",     r["completed"])

    st.divider()
    df_results = pd.DataFrame([
        {
            "Strategy":     r["strategy"],
            "Compute Util": r["compute_util"],
            "Avg Response": r["avg_response"],
            "P95 Response": r["p95_response"],
        }
        for r in results
    ])

    col_a, col_b = st.columns(2)
    with col_a:
        fig = px.bar(
            df_results, x="Strategy", y="Compute Util",
            title="Time-Weighted Compute Utilization", color="Strategy",
            color_discrete_map=COLORS, text_auto=".1%", range_y=[0, 1.05],
        )
        fig.update_layout(showlegend=False)
        st.plotly_chart(fig, use_container_width=True)

    with col_b:
        df_resp = pd.DataFrame(
            [{"Strategy": r["strategy"], "Response (s)": x} for r in results for x in r["responses"]]
        )
        fig = px.box(
            df_resp, x="Strategy", y="Response (s)", color="Strategy",
            color_discrete_map=COLORS, title="Response Time Distribution",
        )
        fig.update_layout(showlegend=False)
        st.plotly_chart(fig, use_container_width=True)

# ── Tab 2: NPU timeline ───────────────────────────────────────────────────────
with tab_timeline:
    names = [r["strategy"] for r in results]
    chosen = st.selectbox("Strategy", names) if len(names) > 1 else names[0]
    r = next(x for x in results if x["strategy"] == chosen)
    df_t = r["task_df"].copy()

    if df_t.empty:
        st.info("No allocations to display.")
    else:
        origin = pd.Timestamp("2024-01-01")
        df_t["Start"] = origin + pd.to_timedelta(df_t["start"], unit="s")
        df_t["Finish"] = origin + pd.to_timedelta(df_t["finish"], unit="s")
        fig = px.timeline(
            df_t, x_start="Start", x_end="Finish", y="npu_id", color="task_id",
            hover_data={"wait": True, "demand": True, "compute": True,
                        "memory": True, "Start": False, "Finish": False},
            title=f"NPU Occupancy — {chosen}",
            labels={"npu_id": "NPU"},
        )
        fig.update_yaxes(categoryorder="category ascending")
        fig.update_layout(height=420, showlegend=False)
        st.plotly_chart(fig, use_container_width=True)
        st.caption("Each bar is one task's share of one NPU. Tasks sharing an NPU overlap.")

# ── Tab 3: Raw Data ───────────────────────────────────────────────────────────
with tab_data:
    st.dataframe(df_results, use_container_width=True)
    r0 = results[0]
    st.subheader(f"Allocation records — {r0['strategy']}")
    st.dataframe(r0["task_df"], use_container_width=True)
    st.download_button(
        label="Download allocation records as CSV",
        data=r0["task_df"].to_csv(index=False).encode(),
        file_name="allocations.csv",
        mime="text/csv",
    )
