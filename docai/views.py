import html
from typing import List, Optional, Tuple
import streamlit as st

from docai.types import Answer, Condition, Medicine
from docai.utils import color_box, widget_key
from docai.wizard import WizardController

LIKELIHOOD_LEVELS = {"high": "high", "medium": "indeterminate", "moderate": "indeterminate", "low": "low"}


# ---------- report blocks ----------
def condition_markdown(rank: int, c: Condition) -> str:
    parts = [f"### {rank}. {c.name}"]
    if c.likelihood:
        parts.append(f"**Likelihood:** {c.likelihood}")
    if c.description:
        parts.append(c.description)
    if c.treatments:
        parts.append("**Treatments**\n" + "\n".join(f"- {t}" for t in c.treatments))
    return "\n\n".join(parts)


def medicine_markdown(m: Medicine) -> str:
    parts = [f"**{m.name}**"]
    if m.dosage:
        parts.append(f"Dosage: {m.dosage}")
    if m.alternatives:
        parts.append("Alternatives:\n" + "\n".join(f"- {a}" for a in m.alternatives))
    return "\n\n".join(parts)


def render_interactive(conditions: List[Condition]) -> None:
    if not conditions:
        st.info("No conditions were identified in the analysis.")
        return
    for i, c in enumerate(conditions, start=1):
        with st.container(border=True):
            st.markdown(condition_markdown(i, c))
            if c.medicines:
                st.markdown("**Medicines**")
                for m in c.medicines:
                    with st.container(border=True):
                        st.markdown(medicine_markdown(m))


# ---------- steps ----------
def render_progress(wizard: WizardController) -> None:
    titles = wizard.step_titles()
    cur = wizard.state.cursor
    st.progress((cur + 1) / len(titles))
    st.caption(f"Step {cur + 1} of {len(titles)}: {titles[cur]}")


def render_symptoms(wizard: WizardController) -> None:
    st.subheader("Describe your symptoms")
    key = widget_key("symptoms")
    if key in st.session_state:
        text = st.text_area("Symptoms", key=key, height=160)
    else:
        text = st.text_area(
            "Symptoms",
            value=wizard.state.symptoms,
            key=key,
            height=160,
            placeholder="Please describe your symptoms in detail...",
        )
    wizard.set_symptoms(text)


def render_question(wizard: WizardController) -> bool:
    """Draw the current follow-up question; True when the cursor moved."""
    i = wizard.question_index()
    item = wizard.state.items[i]
    st.subheader(item.prompt)

    if item.is_yes_no:
        options = ["yes", "no"]
        choice = st.radio(
            "Answer",
            options,
            index=options.index(item.answer.choice) if item.answer.choice in options else None,
            format_func=str.capitalize,
            key=widget_key(f"q{i}_choice"),
            horizontal=True,
        )
        details = None
        if choice == "yes":
            details = st.text_area(
                "Please provide more details...",
                value=item.answer.details or "",
                key=widget_key(f"q{i}_details"),
            )
        answer = Answer(choice=choice or "", details=details)
        wizard.set_answer(i, answer)
        if st.button("Next", type="primary", disabled=not wizard.can_advance()):
            return wizard.record_answer(i, answer)
        return False

    # a form so that Enter in the answer box submits
    with st.form(key=f"question_form_{i}"):
        text = st.text_input("Your answer...", value=item.answer.choice, key=widget_key(f"q{i}_text"))
        submitted = st.form_submit_button("Next", type="primary")
    if submitted and text.strip():
        return wizard.record_answer(i, Answer(choice=text))
    return False


def render_review(wizard: WizardController) -> None:
    s = wizard.state
    st.subheader("Review your answers")
    if wizard.intake_count:
        st.markdown("**Patient Information**")
        p = s.patient
        st.markdown(
            f"- Age: {p.age}\n- Sex: {p.sex}\n- Height: {p.height} cm\n- Weight: {p.weight} kg\n"
            f"- Allergies: {p.allergies}\n- Past Medical History: {p.past_medical_history}\n"
            f"- Current Medications: {p.current_medications}"
        )
    st.markdown("**Symptoms**")
    st.write(s.symptoms)
    if s.items:
        st.markdown("**Questions and Answers**")
        for item in s.items:
            line = f"*{item.prompt}*  \n{item.answer.choice}"
            if item.answer.details:
                line += f"  \n{item.answer.details}"
            st.markdown(line)


def top_condition_banner(conditions: List[Condition]) -> Optional[Tuple[str, str]]:
    if not conditions or not conditions[0].likelihood:
        return None
    top = conditions[0]
    # color_box renders raw html, so model text is escaped
    text = f"Most likely: {html.escape(top.name)} ({html.escape(top.likelihood)})"
    return text, LIKELIHOOD_LEVELS.get(top.likelihood.lower(), "info")


def render_analysis(wizard: WizardController) -> None:
    st.subheader("Analysis")
    conditions = wizard.conditions()
    banner = top_condition_banner(conditions)
    if banner:
        color_box(*banner)
    render_interactive(conditions)
