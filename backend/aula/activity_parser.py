"""Best-effort parsing of generated activity text.

The completion service is asked for a fixed Spanish layout (Nombre / Objetivo /
Materiales / Desarrollo with ``Paso N: ... (duración)`` lines) but follows it
loosely. ``parse_activity_text`` never raises: every section that cannot be
extracted is filled with a literal fallback so the result is always a complete
``GeneratedActivity``.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from .schemas import ActivityDevelopment, ActivityStep, GeneratedActivity


log = logging.getLogger(__name__)


DEFAULT_NAME = "Actividad Generada"
DEFAULT_OBJECTIVE = "Desarrollar habilidades adaptadas a las necesidades específicas del estudiante"
DEFAULT_MATERIALS = ["Materiales según necesidades específicas"]
DEFAULT_STEP_DURATION = "15-20 minutos"
FALLBACK_STEPS = (
	("Introducción a la actividad", "10-15 minutos"),
	("Desarrollo de la actividad principal", "30-40 minutos"),
	("Cierre y reflexión sobre lo aprendido", "10-15 minutos"),
)

_FLAGS = re.IGNORECASE | re.MULTILINE

# Labels may carry markdown emphasis or heading marks: "**Objetivo:**", "## Desarrollo:"
_LABEL_LEAD = r"[ \t]*[#*_>]*[ \t]*"
_LABEL_TAIL = r"[*_]*[ \t]*:[*_]*"


def _label(names: str) -> str:
	return rf"^{_LABEL_LEAD}(?:{names}){_LABEL_TAIL}"


def _next_section(names: str) -> str:
	return rf"(?=\n\s*[#*_>]*[ \t]*(?:{names})|\Z)"


NAME_LABEL_RE = re.compile(_label("Nombre|T[ií]tulo|Actividad") + r"[ \t]*([^\n]+)", _FLAGS)
HEADING_RE = re.compile(r"^[ \t]*#+[ \t]*([^\n]+)", re.MULTILINE)

# Section bodies run lazily up to the next known header line, or to the end
OBJECTIVE_RE = re.compile(
	_label("Objetivos?|Prop[óo]sito") + r"[ \t]*(.*?)" + _next_section("Materiales|Recursos|Desarrollo|Pasos"),
	_FLAGS | re.DOTALL,
)
MATERIALS_RE = re.compile(
	_label("Materiales|Recursos") + r"[ \t]*(.*?)" + _next_section("Desarrollo|Procedimiento|Pasos"),
	_FLAGS | re.DOTALL,
)
MATERIAL_ITEM_SPLIT_RE = re.compile(r"(?:^|\n)[ \t]*(?:[-•*]|\d+\.)")

DEVELOPMENT_RE = re.compile(
	_label("Desarrollo|Procedimiento|Pasos|Actividades") + r"(.*)\Z",
	_FLAGS | re.DOTALL,
)
_STEP_LEAD = r"[ \t]*[#*_>\-]*[ \t]*(?:Paso[ \t]*)?\d+[ \t]*[.:]"
STEP_MARKER_RE = re.compile("^" + _STEP_LEAD, _FLAGS)
# A step description may wrap onto following lines but never runs into the next step marker
STEP_RE = re.compile(
	"^" + _STEP_LEAD + r"[*_]*[ \t]*((?:(?!\n" + _STEP_LEAD + r")[^(])+?)[ \t]*\(([^()\n]+)\)",
	_FLAGS,
)
PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n\s*")
EMBEDDED_DURATION_RE = re.compile(r"\((\d+(?:\s*-\s*\d+)?\s*(?:minutos?|horas?))\)", re.IGNORECASE)


def _clean(value: str) -> str:
	# Trim and drop emphasis marks left around a captured value
	return value.strip().strip("*_").strip()


def _first_value(matches: Iterable[re.Match]) -> Optional[str]:
	for match in matches:
		value = _clean(match.group(1))
		if value:
			return value
	return None


def extract_name(text: str) -> str:
	"""Labelled name, else the first markdown heading, else the first non-empty line."""

	name = _first_value(NAME_LABEL_RE.finditer(text)) or _first_value(HEADING_RE.finditer(text))
	if name:
		return name
	for line in text.splitlines():
		if line.strip():
			return line.strip()
	return DEFAULT_NAME


def extract_objective(text: str) -> str:
	return _first_value(OBJECTIVE_RE.finditer(text)) or DEFAULT_OBJECTIVE


def extract_materials(text: str) -> List[str]:
	match = MATERIALS_RE.search(text)
	materials: List[str] = []
	if match:
		materials = [item.strip() for item in MATERIAL_ITEM_SPLIT_RE.split(match.group(1))]
		materials = [item for item in materials if item]
	if not materials:
		log.debug("No materials found in generated text; using placeholder")
		return list(DEFAULT_MATERIALS)
	return materials


def _paragraph_steps(block: str) -> List[ActivityStep]:
	paragraphs = [p.strip() for p in PARAGRAPH_SPLIT_RE.split(block)]
	# A paragraph opening with "Paso" is a numbered step the primary pattern missed
	paragraphs = [p for p in paragraphs if p and not p.startswith("Paso")]
	if len(paragraphs) <= 1:
		return []
	steps: List[ActivityStep] = []
	for index, paragraph in enumerate(paragraphs):
		duration_match = EMBEDDED_DURATION_RE.search(paragraph)
		if duration_match:
			duration = duration_match.group(1)
			description = paragraph.replace(duration_match.group(0), "", 1).strip()
		else:
			# Placeholder durations grow with the position of the paragraph
			duration = f"{(index + 1) * 10}-{(index + 1) * 10 + 5} minutos"
			description = paragraph
		if description:
			steps.append(ActivityStep(description=description, duration=duration))
	return steps


def extract_development(text: str) -> ActivityDevelopment:
	"""Split the development block into a free-text description and ordered steps.

	Steps come from the first tier that yields anything: numbered ``Paso N: ...
	(duración)`` entries, whose description may wrap over several lines; then
	blank-line separated paragraphs; then the fixed three-step skeleton.
	"""

	description = ""
	steps: List[ActivityStep] = []
	match = DEVELOPMENT_RE.search(text)
	if match:
		block = match.group(1)
		marker = STEP_MARKER_RE.search(block)
		remaining = block
		if marker:
			description = block[: marker.start()].strip()
			remaining = block[marker.start():]
		for step_match in STEP_RE.finditer(remaining):
			step_description = _clean(" ".join(step_match.group(1).split()))
			duration = step_match.group(2).strip() or DEFAULT_STEP_DURATION
			if step_description:
				steps.append(ActivityStep(description=step_description, duration=duration))
		if not steps:
			steps = _paragraph_steps(block)
	if not steps:
		log.debug("No steps recognised in generated text; using fallback skeleton")
		steps = [ActivityStep(description=d, duration=t) for d, t in FALLBACK_STEPS]
	return ActivityDevelopment(description=description, steps=steps)


def parse_activity_text(raw_text: Optional[str]) -> GeneratedActivity:
	text = (raw_text or "").replace("\r\n", "\n").replace("\r", "\n")
	return GeneratedActivity(
		name=extract_name(text),
		objective=extract_objective(text),
		materials=extract_materials(text),
		development=extract_development(text),
	)


__all__ = [
	"DEFAULT_NAME",
	"DEFAULT_OBJECTIVE",
	"DEFAULT_MATERIALS",
	"FALLBACK_STEPS",
	"parse_activity_text",
	"extract_name",
	"extract_objective",
	"extract_materials",
	"extract_development",
]
