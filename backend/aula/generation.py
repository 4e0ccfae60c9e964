"""Activity generation and the educational assistant chat on top of ``LLMClient``."""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .activity_parser import parse_activity_text
from .llm_client import Completion, LLMClient
from .schemas import Barrier, GeneratedActivity, LearningStyle
from .settings import settings


log = logging.getLogger(__name__)


class ModelInfo(BaseModel):
	id: str
	name: str
	description: str
	max_tokens: int
	is_available: bool = True


AVAILABLE_MODELS: List[ModelInfo] = [
	ModelInfo(id="gpt-4.1", name="GPT-4.1", description="El modelo más inteligente para tareas complejas educativas", max_tokens=128000),
	ModelInfo(id="gpt-4.1-mini", name="GPT-4.1 Mini", description="Modelo económico que equilibra velocidad e inteligencia", max_tokens=128000),
	ModelInfo(id="gpt-4.1-nano", name="GPT-4.1 Nano", description="El modelo más rápido y rentable para tareas de baja latencia", max_tokens=16000),
	ModelInfo(id="gpt-4-turbo", name="GPT-4 Turbo", description="Versión mejorada de GPT-4 con mejor respuesta y contexto amplio", max_tokens=128000),
	ModelInfo(id="gpt-3.5-turbo", name="GPT-3.5 Turbo", description="Modelo equilibrado con buena velocidad y calidad para la mayoría de tareas educativas", max_tokens=16385),
]

DEFAULT_MODEL = "gpt-4.1-nano"


SYSTEM_PROMPT = """
Eres un asistente especializado en educación inclusiva, con conocimientos profundos sobre barreras de aprendizaje,
estilos de aprendizaje e intervenciones educativas personalizadas. Tu trabajo es ayudar a crear
actividades educativas adaptadas a las necesidades específicas de cada estudiante.

Debes seguir estas reglas:
1. Las actividades deben ser detalladas y específicas para abordar las barreras indicadas.
2. Debes considerar los estilos de aprendizaje proporcionados.
3. Si tienes información del estudiante, personaliza aún más la actividad.
4. Responde siempre en español.

FORMATO OBLIGATORIO:
Debes estructurar la actividad siguiendo EXACTAMENTE este formato:

Nombre: [Nombre creativo y descriptivo de la actividad]

Objetivo: [Objetivo pedagógico claro y medible]

Materiales:
- [Material 1]
- [Material 2]
- [Material 3]
...

Desarrollo:
La actividad debe incluir una descripción general seguida de pasos numerados, cada uno con duración estimada:

Paso 1: [Descripción detallada] (10-15 minutos)
Paso 2: [Descripción detallada] (15-20 minutos)
Paso 3: [Descripción detallada] (20-25 minutos)
...

Es CRUCIAL que incluyas al menos 3-5 pasos con sus respectivas duraciones entre paréntesis.
Cada paso debe ser detallado y específico, explicando qué deben hacer tanto el docente como los estudiantes.

Recuerda ser creativo pero práctico, proponiendo actividades realizables en contextos educativos reales.
""".strip()


class ActivityGenerationError(RuntimeError):
	pass


class StudentHistory(BaseModel):
	id: str
	name: str
	grade: str
	intervention_observations: List[Optional[str]] = Field(default_factory=list)
	comments: List[str] = Field(default_factory=list)


class ActivityGenerationParams(BaseModel):
	barriers: List[Barrier]
	learning_styles: List[LearningStyle]
	custom_description: Optional[str] = None
	student: Optional[StudentHistory] = None


class ResponseStatistics(BaseModel):
	request_timestamp: int
	response_timestamp: int
	latency_ms: int
	prompt_tokens: int
	completion_tokens: int
	total_tokens: int
	model: str


class GenerationResult(BaseModel):
	activity: GeneratedActivity
	statistics: ResponseStatistics
	raw_text: str


def _now_ms() -> int:
	return int(time.time() * 1000)


def _statistics(request_ts: int, completion: Completion) -> ResponseStatistics:
	response_ts = _now_ms()
	return ResponseStatistics(
		request_timestamp=request_ts,
		response_timestamp=response_ts,
		latency_ms=response_ts - request_ts,
		prompt_tokens=completion.prompt_tokens,
		completion_tokens=completion.completion_tokens,
		total_tokens=completion.total_tokens,
		model=completion.model,
	)


def build_context_messages(params: ActivityGenerationParams) -> List[Dict[str, str]]:
	lines = ["Necesito generar una actividad educativa adaptada a lo siguiente:", "", "BARRERAS DE APRENDIZAJE:"]
	lines += [f"- {b.name}: {b.description}" for b in params.barriers]
	lines += ["", "ESTILOS DE APRENDIZAJE PREFERENTES:"]
	lines += [f"- {s.name}: {s.description}" for s in params.learning_styles]

	student = params.student
	if student is not None:
		lines += ["", "INFORMACIÓN DEL ESTUDIANTE:", f"- Nombre: {student.name}", f"- Grado: {student.grade}"]
		if student.intervention_observations:
			lines += ["", "HISTORIAL DE INTERVENCIONES:"]
			lines += [
				f"- Intervención {i}: {obs or 'Sin observaciones'}"
				for i, obs in enumerate(student.intervention_observations, start=1)
			]
		if student.comments:
			lines += ["", "COMENTARIOS DE PROFESORES:"]
			lines += [f"- Comentario {i}: {c}" for i, c in enumerate(student.comments, start=1)]

	notes = (params.custom_description or "").strip()
	if notes:
		lines += ["", "CONSIDERACIONES ADICIONALES DEL EDUCADOR:", notes]

	lines += [
		"",
		"Por favor, genera una actividad educativa detallada con nombre, objetivo, materiales y desarrollo paso a paso con tiempos estimados.",
	]
	return [
		{"role": "system", "content": SYSTEM_PROMPT},
		{"role": "user", "content": "\n".join(lines)},
	]


async def generate_activity(client: LLMClient, params: ActivityGenerationParams, model: Optional[str] = None) -> GenerationResult:
	request_ts = _now_ms()
	messages = build_context_messages(params)
	try:
		completion = await client.complete(messages, max_tokens=settings.activity_max_tokens, model=model)
	except Exception as exc:
		log.error("Error generating activity: %s", exc)
		raise ActivityGenerationError("No se pudo generar la actividad. Por favor, inténtalo de nuevo.") from exc
	statistics = _statistics(request_ts, completion)
	log.info("Activity generated in %d ms (%d tokens)", statistics.latency_ms, statistics.total_tokens)
	return GenerationResult(
		activity=parse_activity_text(completion.text),
		statistics=statistics,
		raw_text=completion.text,
	)


async def chat_with_assistant(
	client: LLMClient,
	messages: List[Dict[str, str]],
	model: Optional[str] = None,
) -> Tuple[str, ResponseStatistics]:
	request_ts = _now_ms()
	conversation = list(messages)
	if not conversation or conversation[0].get("role") != "system":
		conversation.insert(0, {"role": "system", "content": SYSTEM_PROMPT})
	try:
		completion = await client.complete(conversation, max_tokens=settings.chat_max_tokens, model=model)
	except Exception as exc:
		log.error("Error in assistant conversation: %s", exc)
		raise ActivityGenerationError("No se pudo completar la conversación. Por favor, inténtalo de nuevo.") from exc
	return completion.text, _statistics(request_ts, completion)
