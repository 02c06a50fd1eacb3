import logging
from dataclasses import asdict
import streamlit as st
from docai.config import load_settings
from docai.llm import build_sources
from docai.record_parser import parse_record
from docai.registry import load_intake_steps
from docai.utils import clear_widgets, widget_key
from docai.views import render_progress, render_symptoms, render_question, render_review, render_analysis
from docai.wizard import StepKind, WizardController

settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(levelname)s | %(message)s")

st.set_page_config(page_title="DOC AI", layout="centered")
st.title("DOC AI")
st.caption(
    "Fadlan sharax calaamadahaaga oo ka jawaab dhowr su'aalood oo dheeraad ah.  \n"
    "(Please describe your symptoms and answer a few follow-up questions.)"
)

# 1) One wizard per browser session
if "wizard" not in st.session_state:
    questions, reports = build_sources(settings)
    st.session_state["wizard"] = WizardController(load_intake_steps(settings), questions, reports, settings)
wizard: WizardController = st.session_state["wizard"]

render_progress(wizard)
if wizard.state.error_message:
    st.error(wizard.state.error_message)

# 2) Current step
kind = wizard.step_kind()
if kind == StepKind.INTAKE:
    step = wizard.current_intake_step()
    st.subheader(step.title)
    if wizard.state.cursor == 0:
        found = parse_record()
        if found:
            for name, value in found.items():
                st.session_state[widget_key(name)] = value
            wizard.update_patient(**found)
    info = step.inputs(wizard.state.patient)
    wizard.update_patient(**asdict(info))
elif kind == StepKind.SYMPTOMS:
    render_symptoms(wizard)
elif kind == StepKind.QUESTION:
    if render_question(wizard):
        st.rerun()
elif kind == StepKind.REVIEW:
    render_review(wizard)
else:
    render_analysis(wizard)

# 3) Navigation
back, nxt = st.columns(2)
with back:
    if wizard.state.cursor > 0 and kind != StepKind.ANALYSIS:
        if st.button("Back", disabled=not wizard.can_retreat()):
            wizard.retreat()
            st.rerun()
with nxt:
    if kind in (StepKind.INTAKE, StepKind.SYMPTOMS):
        if st.button("Next", type="primary", disabled=not wizard.can_advance()):
            with st.spinner("Generating questions..." if kind == StepKind.SYMPTOMS else "Loading..."):
                wizard.advance()
            st.rerun()
    elif kind == StepKind.REVIEW:
        if st.button("Submit", type="primary", disabled=not wizard.can_advance()):
            with st.spinner("Analyzing your symptoms..."):
                wizard.advance()
            st.rerun()
    elif kind == StepKind.ANALYSIS:
        st.download_button(
            "Download Report",
            data=wizard.export_pdf(),
            file_name=settings.export.file_name,
            mime="application/pdf",
        )
        if st.button("New Patient"):
            wizard.reset()
            clear_widgets()
            st.session_state.pop("record_token", None)
            st.rerun()

st.caption("Disclaimer: Screening & education only. Not medical advice.")
