import re
import logging
from typing import Dict, Optional
import streamlit as st

try:
    import pdfplumber
    PDF_ENABLED = True
except Exception:
    PDF_ENABLED = False

logger = logging.getLogger(__name__)


# ----------------------------
# Patterns that extract values
# ----------------------------
STRICT: Dict[str, str] = {
    "age": r"(?:Age)\s*[:\-]\s*(\d{1,3})",
    "sex": r"(?:Sex|Gender)\s*[:\-]\s*(Male|Female|M|F)\b",
    "height": r"(?:Height)\s*[:\-]\s*(\d{2,3}(?:\.\d+)?)\s*cm\b",
    "weight": r"(?:Weight)\s*[:\-]\s*(\d{1,3}(?:\.\d+)?)\s*kg\b",
    "allergies": r"(?:Allergies|Known\s+Allergies)\s*[:\-]\s*([^\n]{1,200})",
    "current_medications": r"(?:Current\s+Medications?|Medications?)\s*[:\-]\s*([^\n]{1,200})",
}

# Fallback (looser) patterns for demographics
LOOSE: Dict[str, str] = {
    "age": r"(?:Age)[^\d\n]{0,20}(\d{1,3})",
    "sex": r"(?:Sex|Gender)[^\n]{0,20}?\b(Male|Female|M|F)\b",
    "height": r"(?:Height)[^\d\n]{0,20}(\d{2,3}(?:\.\d+)?)",
    "weight": r"(?:Weight)[^\d\n]{0,20}(\d{1,3}(?:\.\d+)?)",
}

SEX_CODES = {"m": "Male", "male": "Male", "f": "Female", "female": "Female"}


def _find(pattern: str, text: str) -> Optional[str]:
    m = re.search(pattern, text, flags=re.I)
    if m:
        return m.group(1).strip()
    return None


def extract_patient_fields(text: str) -> Dict[str, str]:
    """Pull whatever patient fields can be recognised out of record text."""
    # normalise whitespace a bit
    t = re.sub(r"[^\S\r\n]+", " ", text or "", flags=re.M)
    found: Dict[str, str] = {}
    for key, pattern in STRICT.items():
        value = _find(pattern, t)
        if value is None and key in LOOSE:
            value = _find(LOOSE[key], t)
        if value:
            found[key] = value
    if "sex" in found:
        found["sex"] = SEX_CODES[found["sex"].lower()]
    return found


def parse_record() -> Dict[str, str]:
    with st.expander("Prefill from a medical record PDF (optional)"):
        if not PDF_ENABLED:
            st.info("PDF parsing not available on this env.")
            return {}

        up = st.file_uploader("Upload record PDF (text-based)", type=["pdf"])
        if up is None:
            return {}
        # apply each upload once so later edits are not overwritten on rerun
        token = f"{up.name}:{up.size}"
        if st.session_state.get("record_token") == token:
            return {}
        st.session_state["record_token"] = token
        try:
            with pdfplumber.open(up) as pdf:
                raw_text = "\n".join(page.extract_text() or "" for page in pdf.pages)
        except Exception as e:
            logger.warning(f"Could not read uploaded PDF: {e}")
            st.warning("Could not read that PDF.")
            return {}

        found = extract_patient_fields(raw_text)
        if found:
            st.success("Parsed from PDF:")
            st.json(found)
        else:
            st.info("No patient details recognised in that PDF.")
        return found
