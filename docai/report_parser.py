import html
import re
from typing import Dict, List, Pattern

from docai.types import Condition, Medicine

# Model output is not guaranteed to be well-formed XML, so fields are pulled
# out by scanning for literal <tag>...</tag> pairs. Nothing here raises.

_PATTERNS: Dict[str, Pattern] = {}


def _pattern(tag: str) -> Pattern:
    if tag not in _PATTERNS:
        # a stray opening tag before a record never swallows it: the match
        # starts at the last <tag> before its closing tag
        _PATTERNS[tag] = re.compile(rf"<{tag}>((?:(?!<{tag}>).)*?)</{tag}>", flags=re.S)
    return _PATTERNS[tag]


def _clean(value: str) -> str:
    return html.unescape(value).strip()


def _find(tag: str, text: str) -> str:
    m = _pattern(tag).search(text)
    return _clean(m.group(1)) if m else ""


def _find_all(tag: str, text: str) -> List[str]:
    return [m.group(1) for m in _pattern(tag).finditer(text)]


def _without(tag: str, text: str) -> str:
    return _pattern(tag).sub("", text)


def _parse_medicine(block: str) -> Medicine:
    if "<" not in block:
        # older prompt format: <medicine>Ibuprofen</medicine>
        return Medicine(name=_clean(block))
    return Medicine(
        name=_find("name", block),
        dosage=_find("dosage", block),
        alternatives=[_clean(a) for a in _find_all("alternative", block)],
    )


def _parse_condition(block: str) -> Condition:
    medicines = [_parse_medicine(m) for m in _find_all("medicine", block)]
    # <name> also appears inside each medicine
    head = _without("medicine", block)
    return Condition(
        name=_find("name", head),
        likelihood=_find("likelihood", head),
        description=_find("description", head),
        treatments=[_clean(t) for t in _find_all("treatment", head)],
        medicines=medicines,
    )


def parse_report(text: str) -> List[Condition]:
    """Extract conditions from a report document, in document order.

    The order is the model's most-to-least-likely ranking and is never
    re-sorted. Missing tags give empty strings or empty lists.
    """
    if not text:
        return []
    return [_parse_condition(block) for block in _find_all("condition", text)]


def _esc(value: str) -> str:
    return html.escape(value, quote=False)


def serialize_report(conditions: List[Condition]) -> str:
    """Write the canonical report document.

    parse_report trims values, so it only gives back the same conditions when
    their values carry no leading or trailing whitespace.
    """
    lines = ["<report>"]
    for c in conditions:
        lines.append("  <condition>")
        lines.append(f"    <name>{_esc(c.name)}</name>")
        if c.likelihood.strip():
            lines.append(f"    <likelihood>{_esc(c.likelihood)}</likelihood>")
        lines.append(f"    <description>{_esc(c.description)}</description>")
        lines.append("    <treatments>")
        for t in c.treatments:
            lines.append(f"      <treatment>{_esc(t)}</treatment>")
        lines.append("    </treatments>")
        lines.append("    <medicines>")
        for m in c.medicines:
            lines.append("      <medicine>")
            lines.append(f"        <name>{_esc(m.name)}</name>")
            lines.append(f"        <dosage>{_esc(m.dosage)}</dosage>")
            lines.append("        <alternatives>")
            for a in m.alternatives:
                lines.append(f"          <alternative>{_esc(a)}</alternative>")
            lines.append("        </alternatives>")
            lines.append("      </medicine>")
        lines.append("    </medicines>")
        lines.append("  </condition>")
    lines.append("</report>")
    return "\n".join(lines)
