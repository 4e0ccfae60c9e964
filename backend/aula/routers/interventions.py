from __future__ import annotations
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..crud import clean_text, commit_or_409, ensure_exist, ensure_owner, get_or_404
from ..db import get_db
from ..matching import lookup_name
from ..models import (
	Activity,
	Barrier,
	Intervention,
	InterventionBarrier,
	InterventionComment,
	InterventionLearningStyle,
	LearningStyle,
	Profile,
	Student,
)
from .auth import User, get_current_user


router = APIRouter(prefix="/interventions", tags=["interventions"])


class InterventionIn(BaseModel):
	activity_id: str
	student_id: str
	date: Optional[datetime] = None
	observations: Optional[str] = None
	subject: Optional[str] = None
	barrier_ids: List[str] = Field(default_factory=list)
	learning_style_ids: List[str] = Field(default_factory=list)


class InterventionPatch(BaseModel):
	activity_id: Optional[str] = None
	student_id: Optional[str] = None
	date: Optional[datetime] = None
	observations: Optional[str] = None
	subject: Optional[str] = None
	barrier_ids: Optional[List[str]] = None
	learning_style_ids: Optional[List[str]] = None


class InterventionOut(BaseModel):
	id: str
	activity_id: str
	activity_name: str
	student_id: str
	student_name: str
	teacher_id: str
	date: datetime
	observations: Optional[str] = None
	subject: Optional[str] = None
	barrier_ids: List[str]
	learning_style_ids: List[str]


class CommentIn(BaseModel):
	content: str


class CommentOut(BaseModel):
	id: str
	intervention_id: str
	author_id: str
	author_name: str
	content: str
	created_at: datetime


def _tags(db: Session, intervention_ids: Iterable[str]) -> tuple[Dict[str, List[str]], Dict[str, List[str]]]:
	ids = list(intervention_ids)
	barriers: Dict[str, List[str]] = {i: [] for i in ids}
	styles: Dict[str, List[str]] = {i: [] for i in ids}
	if ids:
		for row in db.query(InterventionBarrier).filter(InterventionBarrier.intervention_id.in_(ids)):
			barriers[row.intervention_id].append(row.barrier_id)
		for row in db.query(InterventionLearningStyle).filter(InterventionLearningStyle.intervention_id.in_(ids)):
			styles[row.intervention_id].append(row.learning_style_id)
	return barriers, styles


def _set_tags(db: Session, intervention_id: str, barrier_ids: Iterable[str], style_ids: Iterable[str]) -> None:
	db.query(InterventionBarrier).filter(InterventionBarrier.intervention_id == intervention_id).delete()
	db.query(InterventionLearningStyle).filter(InterventionLearningStyle.intervention_id == intervention_id).delete()
	for barrier_id in dict.fromkeys(barrier_ids):
		db.add(InterventionBarrier(intervention_id=intervention_id, barrier_id=barrier_id))
	for style_id in dict.fromkeys(style_ids):
		db.add(InterventionLearningStyle(intervention_id=intervention_id, learning_style_id=style_id))


def _to_out(db: Session, rows: List[Intervention]) -> List[InterventionOut]:
	barriers, styles = _tags(db, [r.id for r in rows])
	students = db.query(Student.id, Student.name).filter(Student.id.in_(sorted({r.student_id for r in rows}))).all() if rows else []
	activities = db.query(Activity.id, Activity.name).filter(Activity.id.in_(sorted({r.activity_id for r in rows}))).all() if rows else []
	return [
		InterventionOut(
			id=r.id,
			activity_id=r.activity_id,
			activity_name=lookup_name(r.activity_id, activities),
			student_id=r.student_id,
			student_name=lookup_name(r.student_id, students),
			teacher_id=r.teacher_id,
			date=r.date,
			observations=r.observations,
			subject=r.subject,
			barrier_ids=sorted(barriers[r.id]),
			learning_style_ids=sorted(styles[r.id]),
		)
		for r in rows
	]


def _check_references(db: Session, activity_id: Optional[str], student_id: Optional[str], barrier_ids: Iterable[str], style_ids: Iterable[str]) -> None:
	if activity_id is not None:
		get_or_404(db, Activity, activity_id, "Actividad no encontrada")
	if student_id is not None:
		get_or_404(db, Student, student_id, "Estudiante no encontrado")
	ensure_exist(db, Barrier, barrier_ids, "Barreras inexistentes")
	ensure_exist(db, LearningStyle, style_ids, "Estilos de aprendizaje inexistentes")


def create_intervention(db: Session, user: User, req: InterventionIn) -> InterventionOut:
	_check_references(db, req.activity_id, req.student_id, req.barrier_ids, req.learning_style_ids)
	row = Intervention(
		activity_id=req.activity_id,
		student_id=req.student_id,
		teacher_id=user.id,
		date=req.date or datetime.utcnow(),
		observations=clean_text(req.observations) or None,
		subject=clean_text(req.subject) or user.subject,
	)
	db.add(row)
	db.flush()
	_set_tags(db, row.id, req.barrier_ids, req.learning_style_ids)
	commit_or_409(db)
	db.refresh(row)
	return _to_out(db, [row])[0]


@router.get("", response_model=List[InterventionOut])
def list_interventions(
	student_id: Optional[str] = None,
	teacher_id: Optional[str] = None,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	query = db.query(Intervention)
	if student_id:
		query = query.filter(Intervention.student_id == student_id)
	if teacher_id:
		query = query.filter(Intervention.teacher_id == teacher_id)
	return _to_out(db, query.order_by(Intervention.date.desc()).all())


@router.get("/{intervention_id}", response_model=InterventionOut)
def get_intervention(intervention_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Intervention, intervention_id, "Intervención no encontrada")
	return _to_out(db, [row])[0]


@router.post("", response_model=InterventionOut, status_code=201)
def post_intervention(req: InterventionIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return create_intervention(db, user, req)


@router.patch("/{intervention_id}", response_model=InterventionOut)
def update_intervention(intervention_id: str, req: InterventionPatch, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Intervention, intervention_id, "Intervención no encontrada")
	ensure_owner(row, user.id, field="teacher_id")
	_check_references(db, req.activity_id, req.student_id, req.barrier_ids or [], req.learning_style_ids or [])
	if req.activity_id is not None:
		row.activity_id = req.activity_id
	if req.student_id is not None:
		row.student_id = req.student_id
	if req.date is not None:
		row.date = req.date
	if "observations" in req.model_fields_set:
		row.observations = clean_text(req.observations) or None
	if "subject" in req.model_fields_set:
		row.subject = clean_text(req.subject) or None
	if req.barrier_ids is not None or req.learning_style_ids is not None:
		current_barriers, current_styles = _tags(db, [row.id])
		_set_tags(
			db,
			row.id,
			req.barrier_ids if req.barrier_ids is not None else current_barriers[row.id],
			req.learning_style_ids if req.learning_style_ids is not None else current_styles[row.id],
		)
	commit_or_409(db)
	db.refresh(row)
	return _to_out(db, [row])[0]


@router.delete("/{intervention_id}", status_code=204)
def delete_intervention(intervention_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Intervention, intervention_id, "Intervención no encontrada")
	ensure_owner(row, user.id, field="teacher_id")
	db.delete(row)
	commit_or_409(db)


# Follow-up comments ---------------------------------------------------

def _comments_out(db: Session, rows: List[InterventionComment]) -> List[CommentOut]:
	authors = db.query(Profile).filter(Profile.id.in_(sorted({r.author_id for r in rows}))).all() if rows else []
	names = [{"id": a.id, "name": " ".join(p for p in (a.name, a.lastname) if p) or a.email} for a in authors]
	return [
		CommentOut(
			id=r.id,
			intervention_id=r.intervention_id,
			author_id=r.author_id,
			author_name=lookup_name(r.author_id, names),
			content=r.content,
			created_at=r.created_at,
		)
		for r in rows
	]


@router.get("/{intervention_id}/comments", response_model=List[CommentOut])
def list_comments(intervention_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	get_or_404(db, Intervention, intervention_id, "Intervención no encontrada")
	rows = (
		db.query(InterventionComment)
		.filter(InterventionComment.intervention_id == intervention_id)
		.order_by(InterventionComment.created_at)
		.all()
	)
	return _comments_out(db, rows)


@router.post("/{intervention_id}/comments", response_model=CommentOut, status_code=201)
def add_comment(intervention_id: str, req: CommentIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	get_or_404(db, Intervention, intervention_id, "Intervención no encontrada")
	content = clean_text(req.content)
	if not content:
		raise HTTPException(status_code=400, detail="El comentario no puede estar vacío")
	row = InterventionComment(intervention_id=intervention_id, author_id=user.id, content=content)
	db.add(row)
	commit_or_409(db)
	db.refresh(row)
	return _comments_out(db, [row])[0]
