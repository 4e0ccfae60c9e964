from __future__ import annotations
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .. import storage
from ..activity_parser import parse_activity_text
from ..crud import ensure_exist, get_or_404
from ..db import get_db
from ..generation import (
	AVAILABLE_MODELS,
	DEFAULT_MODEL,
	ActivityGenerationError,
	ActivityGenerationParams,
	GenerationResult,
	ModelInfo,
	ResponseStatistics,
	StudentHistory,
	chat_with_assistant,
	generate_activity,
)
from ..llm_client import LLMClient
from ..models import Barrier, Intervention, InterventionComment, LearningStyle, Student
from ..schemas import Barrier as BarrierSchema
from ..schemas import GeneratedActivity
from ..schemas import LearningStyle as LearningStyleSchema
from ..settings import settings
from .activities import ActivityOut, activity_out
from .auth import User, get_current_user


router = APIRouter(prefix="/assistant", tags=["assistant"])


async def get_llm_client():
	if not settings.llm_configured:
		raise HTTPException(status_code=503, detail="El asistente no está configurado")
	client = LLMClient()
	try:
		yield client
	finally:
		await client.aclose()


class ModelsResponse(BaseModel):
	default: str
	models: List[ModelInfo]


class GenerateRequest(BaseModel):
	barrier_ids: List[str]
	learning_style_ids: List[str] = Field(default_factory=list)
	custom_description: Optional[str] = None
	student_id: Optional[str] = None
	model: Optional[str] = None


class SaveRequest(BaseModel):
	activity: GeneratedActivity
	barrier_ids: List[str] = Field(default_factory=list)
	learning_style_ids: List[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
	role: Literal["system", "user", "assistant"]
	content: str


class ChatRequest(BaseModel):
	messages: List[ChatMessage]
	model: Optional[str] = None


class ChatResponse(BaseModel):
	reply: str
	statistics: ResponseStatistics


class ParseRequest(BaseModel):
	text: str


def _check_model(model: Optional[str]) -> Optional[str]:
	if model is None:
		return None
	if model not in {m.id for m in AVAILABLE_MODELS if m.is_available}:
		raise HTTPException(status_code=400, detail=f"Modelo no disponible: {model}")
	return model


def _ordered(db: Session, model, ids: List[str]):
	rows = {r.id: r for r in db.query(model).filter(model.id.in_(sorted(set(ids))))}
	return [rows[i] for i in dict.fromkeys(ids) if i in rows]


def student_history(db: Session, student_id: str) -> StudentHistory:
	student = get_or_404(db, Student, student_id, "Estudiante no encontrado")
	interventions = (
		db.query(Intervention)
		.filter(Intervention.student_id == student_id)
		.order_by(Intervention.date)
		.all()
	)
	comments = []
	if interventions:
		comments = (
			db.query(InterventionComment.content)
			.filter(InterventionComment.intervention_id.in_([i.id for i in interventions]))
			.order_by(InterventionComment.created_at)
			.all()
		)
	return StudentHistory(
		id=student.id,
		name=student.name,
		grade=student.grade,
		intervention_observations=[i.observations for i in interventions],
		comments=[c.content for c in comments],
	)


@router.get("/models", response_model=ModelsResponse)
def list_models(user: User = Depends(get_current_user)):
	return ModelsResponse(default=DEFAULT_MODEL, models=AVAILABLE_MODELS)


@router.post("/generate", response_model=GenerationResult)
async def generate(
	req: GenerateRequest,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	client: LLMClient = Depends(get_llm_client),
):
	if not req.barrier_ids:
		raise HTTPException(status_code=400, detail="Seleccione al menos una barrera")
	model = _check_model(req.model)
	ensure_exist(db, Barrier, req.barrier_ids, "Barreras inexistentes")
	ensure_exist(db, LearningStyle, req.learning_style_ids, "Estilos de aprendizaje inexistentes")
	params = ActivityGenerationParams(
		barriers=[BarrierSchema.model_validate(b) for b in _ordered(db, Barrier, req.barrier_ids)],
		learning_styles=[LearningStyleSchema.model_validate(s) for s in _ordered(db, LearningStyle, req.learning_style_ids)],
		custom_description=req.custom_description,
		student=student_history(db, req.student_id) if req.student_id else None,
	)
	try:
		return await generate_activity(client, params, model=model)
	except ActivityGenerationError as e:
		raise HTTPException(status_code=502, detail=str(e))


@router.post("/save", response_model=ActivityOut, status_code=201)
def save(req: SaveRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	if not req.activity.name.strip():
		raise HTTPException(status_code=400, detail="El nombre es obligatorio")
	ensure_exist(db, Barrier, req.barrier_ids, "Barreras inexistentes")
	ensure_exist(db, LearningStyle, req.learning_style_ids, "Estilos de aprendizaje inexistentes")
	row = storage.save_generated_activity(db, req.activity, user.id, req.barrier_ids, req.learning_style_ids)
	return activity_out(db, row)


@router.post("/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, user: User = Depends(get_current_user), client: LLMClient = Depends(get_llm_client)):
	if not any(m.role == "user" and m.content.strip() for m in req.messages):
		raise HTTPException(status_code=400, detail="El mensaje no puede estar vacío")
	model = _check_model(req.model)
	try:
		reply, statistics = await chat_with_assistant(client, [m.model_dump() for m in req.messages], model=model)
	except ActivityGenerationError as e:
		raise HTTPException(status_code=502, detail=str(e))
	return ChatResponse(reply=reply, statistics=statistics)


@router.post("/parse", response_model=GeneratedActivity)
def parse(req: ParseRequest, user: User = Depends(get_current_user)):
	return parse_activity_text(req.text)
