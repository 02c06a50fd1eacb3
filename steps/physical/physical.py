from dataclasses import replace
import streamlit as st
from docai.types import PatientInfo
from docai.utils import text_field

id = "physical"
title = "Physical Info"
fields = ("height", "weight")


def inputs(info: PatientInfo) -> PatientInfo:
    c1, c2 = st.columns(2)
    with c1:
        height = text_field("Height (cm)", "height", info.height)
    with c2:
        weight = text_field("Weight (kg)", "weight", info.weight)
    return replace(info, height=height, weight=weight)
