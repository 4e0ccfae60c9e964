from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..crud import clean_text, commit_or_409, ensure_owner, get_or_404
from ..db import get_db
from ..models import Barrier
from ..schemas import Barrier as BarrierOut
from .auth import User, get_current_user


router = APIRouter(prefix="/barriers", tags=["barriers"])


class BarrierIn(BaseModel):
	name: str
	description: str = ""


class BarrierPatch(BaseModel):
	name: Optional[str] = None
	description: Optional[str] = None


@router.get("", response_model=List[BarrierOut])
def list_barriers(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return db.query(Barrier).order_by(Barrier.name).all()


@router.get("/{barrier_id}", response_model=BarrierOut)
def get_barrier(barrier_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return get_or_404(db, Barrier, barrier_id, "Barrera no encontrada")


@router.post("", response_model=BarrierOut, status_code=201)
def create_barrier(req: BarrierIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name = clean_text(req.name)
	if not name:
		raise HTTPException(status_code=400, detail="El nombre es obligatorio")
	row = Barrier(name=name, description=clean_text(req.description), created_by=user.id)
	db.add(row)
	commit_or_409(db)
	db.refresh(row)
	return row


@router.patch("/{barrier_id}", response_model=BarrierOut)
def update_barrier(barrier_id: str, req: BarrierPatch, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Barrier, barrier_id, "Barrera no encontrada")
	ensure_owner(row, user.id)
	if req.name is not None:
		if not clean_text(req.name):
			raise HTTPException(status_code=400, detail="El nombre es obligatorio")
		row.name = clean_text(req.name)
	if req.description is not None:
		row.description = clean_text(req.description)
	commit_or_409(db)
	db.refresh(row)
	return row


@router.delete("/{barrier_id}", status_code=204)
def delete_barrier(barrier_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Barrier, barrier_id, "Barrera no encontrada")
	ensure_owner(row, user.id)
	db.delete(row)
	commit_or_409(db)
