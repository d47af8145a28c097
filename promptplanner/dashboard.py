import asyncio
import json
import os

import pandas as pd
import plotly.express as px
import streamlit as st

from promptplanner import config as app_config
from promptplanner.dynamic_config import load_yaml_config, apply_config
from promptplanner.llm_provider import provider_catalogue
from promptplanner.models import ProviderSettings
from promptplanner.workflow import create_plan, PlannerError

STEP_ICONS = {
    "foundation": "⚙️",
    "feature": "💻",
    "enhancement": "💡",
    "testing": "🧪",
}


def parse_hours(value):
    """First number in an hours estimate such as '12', '10-15' or '约20小时'."""
    digits = ""
    for char in str(value or ""):
        if char.isdigit() or (char == "." and digits and "." not in digits):
            digits += char
        elif digits:
            break
    try:
        return float(digits) if digits else None
    except ValueError:
        return None


def load_config():
    """Apply the YAML file and relay URL handed over by `promptplanner ui`."""
    apply_config(load_yaml_config(os.getenv("PROMPTPLANNER_CONFIG")))


def reset_checklist(state):
    """Forget the checkbox state of the previous plan."""
    for key in [k for k in state.keys() if str(k).startswith("done_")]:
        del state[key]
    state["done_steps"] = set()


def init_state(catalogue):
    defaults = {
        "provider": app_config.DEFAULT_PROVIDER,
        "model": catalogue.get(app_config.DEFAULT_PROVIDER, {}).get("defaultModel", ""),
        "endpoint": catalogue.get(app_config.DEFAULT_PROVIDER, {}).get("endpoint", ""),
        "api_key": "",
        "plan": None,
        "done_steps": set(),
    }
    for key, value in defaults.items():
        st.session_state.setdefault(key, value)


def on_provider_change(catalogue):
    """Switching provider resets the model and endpoint to that provider's defaults."""
    entry = catalogue[st.session_state.provider]
    st.session_state.model = entry["defaultModel"]
    st.session_state.endpoint = entry["endpoint"]


def show_api_config(catalogue):
    with st.expander("⚙️ AI service configuration", expanded=not st.session_state.api_key):
        st.radio(
            "AI service",
            options=list(catalogue),
            format_func=lambda key: catalogue[key]["name"],
            key="provider",
            horizontal=True,
            on_change=on_provider_change,
            args=(catalogue,),
        )
        provider = st.session_state.provider
        entry = catalogue[provider]

        if provider == "custom":
            st.text_input("API endpoint", key="endpoint",
                          placeholder="https://api.example.com/v1/chat/completions")
            st.text_input("Model name", key="model", placeholder="model-name")
        else:
            if st.session_state.model not in entry["models"]:
                st.session_state.model = entry["defaultModel"]
            st.selectbox("Model", entry["models"], key="model")
            st.caption(f"Endpoint: {entry['endpoint']}")

        st.text_input("API key", key="api_key", type="password",
                      help="Sent to the relay with each request and never stored.")
        st.caption(f"Relay: {app_config.RELAY_URL}")


def show_analysis(analysis):
    st.subheader(f"📋 {analysis.project_name}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Project Type", analysis.project_type or "N/A")
    col2.metric("Complexity", analysis.complexity or "N/A")
    col3.metric("Estimated Hours", analysis.estimated_hours or "N/A")

    col1, col2 = st.columns(2)
    with col1:
        st.write("### 🎯 Main Features")
        st.markdown("\n".join(f"- {f}" for f in analysis.main_features) or "_None_")
        st.write("### 🛠️ Recommended Tech")
        st.markdown("\n".join(f"- {t}" for t in analysis.recommended_tech) or "_None_")
    with col2:
        st.write("### ⚠️ Technical Challenges")
        st.markdown("\n".join(f"- {c}" for c in analysis.technical_challenges) or "_None_")
        st.write("### 🚧 Risk Factors")
        st.markdown("\n".join(f"- {r}" for r in analysis.risk_factors) or "_None_")

    if analysis.development_phases:
        st.write("### ⏱️ Development Phases")
        phase_df = pd.DataFrame([
            {
                "Phase": p.phase,
                "Description": p.description,
                "Tasks": len(p.tasks),
                "Estimated Hours": p.estimated_hours,
                "hours": parse_hours(p.estimated_hours),
            }
            for p in analysis.development_phases
        ])
        st.dataframe(phase_df.drop(columns=["hours"]), hide_index=True)

        chart_df = phase_df.dropna(subset=["hours"])
        if not chart_df.empty:
            fig = px.bar(chart_df, x="Phase", y="hours",
                         title="Estimated Hours per Phase",
                         labels={"hours": "Hours"})
            st.plotly_chart(fig)

    if analysis.recommendations:
        st.write("### 💡 Recommendations")
        st.markdown("\n".join(f"- {r}" for r in analysis.recommendations))


def show_steps(plan):
    st.write("## ✅ Development Checklist")
    done = st.session_state.done_steps
    st.progress(len(done) / len(plan.steps) if plan.steps else 0.0,
                text=f"{len(done)} of {len(plan.steps)} steps done")

    for index, step in enumerate(plan.steps, start=1):
        icon = STEP_ICONS.get(step.type, "💻")
        with st.expander(f"{icon} Step {index}: {step.title}"):
            checked = st.checkbox("Done", value=step.id in done, key=f"done_{step.id}")
            if checked:
                done.add(step.id)
            else:
                done.discard(step.id)
            # st.code renders a copy-to-clipboard button
            st.code(step.prompt, language="markdown")

    st.download_button(
        label="⬇️ Download Plan",
        data=json.dumps(plan.to_dict(), indent=2, ensure_ascii=False),
        file_name=f"{plan.analysis.project_name}_plan.json",
        mime="application/json"
    )


def main():
    st.set_page_config(
        page_title="Prompt Planner",
        page_icon="🧠",
        layout="wide"
    )

    st.title("🧠 Developer Context Prompt Planner")
    st.write("Project analysis and phase-by-phase prompts from Claude, OpenAI, xAI, DeepSeek or a custom API.")

    load_config()
    catalogue = provider_catalogue()
    init_state(catalogue)
    show_api_config(catalogue)

    description = st.text_area(
        "Describe your project",
        height=150,
        placeholder="e.g. A todo app with tags, due-date reminders and a dark mode",
    )

    if st.button("🔍 Analyze", type="primary"):
        settings = ProviderSettings(
            provider=st.session_state.provider,
            api_key=st.session_state.api_key,
            model=st.session_state.model,
            endpoint=st.session_state.endpoint,
        )
        with st.spinner("Analyzing project..."):
            try:
                plan = asyncio.run(create_plan(description, settings))
                reset_checklist(st.session_state)
                st.session_state.plan = plan
            except PlannerError as e:
                st.error(str(e))

    plan = st.session_state.plan
    if plan:
        show_analysis(plan.analysis)
        show_steps(plan)


if __name__ == "__main__":
    main()
