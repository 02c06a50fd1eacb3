from dataclasses import replace
import streamlit as st
from docai.types import PatientInfo, SEX_OPTIONS
from docai.utils import text_field, widget_key

id = "general"
title = "General Info"
fields = ("age", "sex")


def inputs(info: PatientInfo) -> PatientInfo:
    c1, c2 = st.columns(2)
    with c1:
        age = text_field("Age", "age", info.age)
    with c2:
        key = widget_key("sex")
        if key in st.session_state:
            sex = st.radio("Sex", SEX_OPTIONS, key=key, horizontal=True)
        else:
            idx = SEX_OPTIONS.index(info.sex) if info.sex in SEX_OPTIONS else None
            sex = st.radio("Sex", SEX_OPTIONS, index=idx, key=key, horizontal=True)
    return replace(info, age=age, sex=sex or "")
