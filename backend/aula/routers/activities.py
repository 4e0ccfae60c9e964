from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .. import storage
from ..crud import clean_text, commit_or_409, ensure_exist, ensure_owner, get_or_404
from ..db import get_db
from ..models import Activity, Barrier, LearningStyle, Subject
from ..schemas import ActivityDevelopment
from .auth import User, get_current_user


router = APIRouter(prefix="/activities", tags=["activities"])


class ActivityIn(BaseModel):
	name: str
	objective: str = ""
	# Accepts the generator shape or the form shape (durationMin/durationMax/durationUnit)
	materials: Any = Field(default_factory=list)
	development: Any = None
	subject_id: Optional[str] = None
	barrier_ids: List[str] = Field(default_factory=list)
	learning_style_ids: List[str] = Field(default_factory=list)


class ActivityPatch(BaseModel):
	name: Optional[str] = None
	objective: Optional[str] = None
	materials: Any = None
	development: Any = None
	subject_id: Optional[str] = None
	barrier_ids: Optional[List[str]] = None
	learning_style_ids: Optional[List[str]] = None


class ActivityOut(BaseModel):
	id: str
	name: str
	objective: str
	materials: List[str]
	development: ActivityDevelopment
	subject_id: Optional[str] = None
	barrier_ids: List[str]
	learning_style_ids: List[str]
	created_by: str
	created_at: datetime


def activity_out(db: Session, row: Activity, tags: Optional[tuple[dict, dict]] = None) -> ActivityOut:
	barriers, styles = tags or storage.tag_ids(db, [row.id])
	activity = storage.activity_from_row(row, barriers[row.id], styles[row.id])
	return ActivityOut(
		id=activity.id,
		name=activity.name,
		objective=activity.objective,
		materials=activity.materials,
		development=activity.development,
		subject_id=row.subject_id,
		barrier_ids=sorted(activity.barrier_ids),
		learning_style_ids=sorted(activity.learning_style_ids),
		created_by=row.created_by,
		created_at=row.created_at,
	)


def _check_references(db: Session, subject_id: Optional[str], barrier_ids: List[str], style_ids: List[str]) -> None:
	if subject_id:
		ensure_exist(db, Subject, [subject_id], "Asignatura inexistente")
	ensure_exist(db, Barrier, barrier_ids, "Barreras inexistentes")
	ensure_exist(db, LearningStyle, style_ids, "Estilos de aprendizaje inexistentes")


@router.get("", response_model=List[ActivityOut])
def list_activities(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	rows = db.query(Activity).order_by(Activity.created_at.desc()).all()
	tags = storage.tag_ids(db, [r.id for r in rows])
	return [activity_out(db, row, tags) for row in rows]


@router.get("/{activity_id}", response_model=ActivityOut)
def get_activity(activity_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Activity, activity_id, "Actividad no encontrada")
	return activity_out(db, row)


@router.post("", response_model=ActivityOut, status_code=201)
def create_activity(req: ActivityIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name = clean_text(req.name)
	if not name:
		raise HTTPException(status_code=400, detail="El nombre es obligatorio")
	_check_references(db, req.subject_id, req.barrier_ids, req.learning_style_ids)
	row = Activity(
		name=name,
		objective=clean_text(req.objective),
		materials=storage.normalize_materials(req.materials),
		development=storage.development_to_json(storage.normalize_development(req.development)),
		subject_id=req.subject_id or None,
		created_by=user.id,
	)
	db.add(row)
	db.flush()
	storage.set_activity_tags(db, row.id, req.barrier_ids, req.learning_style_ids, user_id=user.id)
	commit_or_409(db)
	db.refresh(row)
	return activity_out(db, row)


@router.patch("/{activity_id}", response_model=ActivityOut)
def update_activity(activity_id: str, req: ActivityPatch, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Activity, activity_id, "Actividad no encontrada")
	ensure_owner(row, user.id)
	fields = req.model_fields_set
	if "name" in fields and req.name is not None:
		if not clean_text(req.name):
			raise HTTPException(status_code=400, detail="El nombre es obligatorio")
		row.name = clean_text(req.name)
	if "objective" in fields and req.objective is not None:
		row.objective = clean_text(req.objective)
	if "materials" in fields:
		row.materials = storage.normalize_materials(req.materials)
	if "development" in fields:
		row.development = storage.development_to_json(storage.normalize_development(req.development))
	if "subject_id" in fields:
		if req.subject_id:
			ensure_exist(db, Subject, [req.subject_id], "Asignatura inexistente")
		row.subject_id = req.subject_id or None
	if req.barrier_ids is not None or req.learning_style_ids is not None:
		current_barriers, current_styles = storage.tag_ids(db, [row.id])
		barrier_ids = req.barrier_ids if req.barrier_ids is not None else sorted(current_barriers[row.id])
		style_ids = req.learning_style_ids if req.learning_style_ids is not None else sorted(current_styles[row.id])
		_check_references(db, None, barrier_ids, style_ids)
		storage.set_activity_tags(db, row.id, barrier_ids, style_ids, user_id=user.id)
	commit_or_409(db)
	db.refresh(row)
	return activity_out(db, row)


@router.delete("/{activity_id}", status_code=204)
def delete_activity(activity_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Activity, activity_id, "Actividad no encontrada")
	ensure_owner(row, user.id)
	db.delete(row)
	commit_or_409(db)
