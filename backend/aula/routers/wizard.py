from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .. import storage
from ..db import get_db
from ..matching import WizardSelection, lookup_name
from ..models import Barrier, LearningStyle
from ..schemas import ActivityDevelopment
from .auth import User, get_current_user
from .interventions import InterventionIn, InterventionOut, create_intervention


router = APIRouter(prefix="/wizard", tags=["wizard"])


class CandidateActivity(BaseModel):
	id: str
	name: str
	objective: str
	materials: List[str]
	development: ActivityDevelopment
	barrier_names: List[str]
	learning_style_names: List[str]


class WizardInterventionRequest(BaseModel):
	barrier_id: Optional[str] = None
	style_ids: List[str] = Field(default_factory=list)
	activity_id: Optional[str] = None
	student_id: str
	observations: Optional[str] = None


def _split_ids(values: List[str]) -> List[str]:
	# Accepts repeated params (?style_ids=a&style_ids=b) and comma lists (?style_ids=a,b)
	ids = [part.strip() for value in values for part in value.split(",")]
	return list(dict.fromkeys(i for i in ids if i))


@router.get("/activities", response_model=List[CandidateActivity])
def candidate_activities(
	barrier_id: Optional[str] = None,
	style_ids: List[str] = Query(default=[]),
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
):
	selection = WizardSelection(barrier_id=barrier_id, style_ids=_split_ids(style_ids))
	if not selection.ready:
		return []
	barriers = db.query(Barrier.id, Barrier.name).all()
	styles = db.query(LearningStyle.id, LearningStyle.name).all()
	return [
		CandidateActivity(
			id=a.id,
			name=a.name,
			objective=a.objective,
			materials=a.materials,
			development=a.development,
			barrier_names=sorted(lookup_name(b, barriers) for b in a.barrier_ids),
			learning_style_names=sorted(lookup_name(s, styles) for s in a.learning_style_ids),
		)
		for a in selection.candidates(storage.load_activities(db))
	]


@router.post("/intervention", response_model=InterventionOut, status_code=201)
def intervention_from_selection(req: WizardInterventionRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	if not req.activity_id:
		raise HTTPException(status_code=400, detail="Debe seleccionar una actividad")
	selection = WizardSelection(barrier_id=req.barrier_id, style_ids=_split_ids(req.style_ids), activity_id=req.activity_id)
	if not selection.ready:
		raise HTTPException(status_code=400, detail="Seleccione una barrera y al menos un estilo de aprendizaje")
	if selection.activity_id not in {a.id for a in selection.candidates(storage.load_activities(db))}:
		raise HTTPException(status_code=400, detail="La actividad no coincide con la barrera y los estilos seleccionados")
	return create_intervention(
		db,
		user,
		InterventionIn(
			activity_id=selection.activity_id,
			student_id=req.student_id,
			observations=req.observations,
			barrier_ids=[selection.barrier_id],
			learning_style_ids=selection.style_ids,
		),
	)
