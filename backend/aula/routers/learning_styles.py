from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..crud import clean_text, commit_or_409, ensure_owner, get_or_404
from ..db import get_db
from ..models import LearningStyle
from ..schemas import LearningStyle as LearningStyleOut
from .auth import User, get_current_user


router = APIRouter(prefix="/learning-styles", tags=["learning-styles"])


class LearningStyleIn(BaseModel):
	name: str
	description: str = ""
	color: Optional[str] = None


class LearningStylePatch(BaseModel):
	name: Optional[str] = None
	description: Optional[str] = None
	color: Optional[str] = None


@router.get("", response_model=List[LearningStyleOut])
def list_learning_styles(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return db.query(LearningStyle).order_by(LearningStyle.name).all()


@router.get("/{style_id}", response_model=LearningStyleOut)
def get_learning_style(style_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return get_or_404(db, LearningStyle, style_id, "Estilo de aprendizaje no encontrado")


@router.post("", response_model=LearningStyleOut, status_code=201)
def create_learning_style(req: LearningStyleIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name = clean_text(req.name)
	if not name:
		raise HTTPException(status_code=400, detail="El nombre es obligatorio")
	row = LearningStyle(
		name=name,
		description=clean_text(req.description),
		color=clean_text(req.color) or None,
		created_by=user.id,
	)
	db.add(row)
	commit_or_409(db)
	db.refresh(row)
	return row


@router.patch("/{style_id}", response_model=LearningStyleOut)
def update_learning_style(style_id: str, req: LearningStylePatch, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, LearningStyle, style_id, "Estilo de aprendizaje no encontrado")
	ensure_owner(row, user.id)
	if req.name is not None:
		if not clean_text(req.name):
			raise HTTPException(status_code=400, detail="El nombre es obligatorio")
		row.name = clean_text(req.name)
	if req.description is not None:
		row.description = clean_text(req.description)
	if req.color is not None:
		row.color = clean_text(req.color) or None
	commit_or_409(db)
	db.refresh(row)
	return row


@router.delete("/{style_id}", status_code=204)
def delete_learning_style(style_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, LearningStyle, style_id, "Estilo de aprendizaje no encontrado")
	ensure_owner(row, user.id)
	db.delete(row)
	commit_or_409(db)
