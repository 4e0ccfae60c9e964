from __future__ import annotations
from collections import Counter
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..matching import UNKNOWN_NAME, lookup_name
from ..models import Activity, ActivityBarrier, ActivityLearningStyle, Barrier, Intervention, LearningStyle, Student
from .auth import User, get_current_user


router = APIRouter(prefix="/dashboard", tags=["dashboard"])

MONTH_NAMES = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]
DEFAULT_STYLE_COLOR = "#3b82f6"
NO_NAME = "Sin nombre"
RECENT_LIMIT = 5
MONTHS_BACK = 6


class Counts(BaseModel):
	activities: int
	barriers: int
	interventions: int
	students: int


class RecentActivity(BaseModel):
	id: str
	name: str
	created_at: datetime


class RecentIntervention(BaseModel):
	id: str
	date: datetime
	student_name: str
	activity_name: str


class NamedCount(BaseModel):
	id: str
	name: str
	count: int


class StyleCount(NamedCount):
	color: str


class MonthCount(BaseModel):
	month: str
	count: int


class DashboardOut(BaseModel):
	counts: Counts
	recent_activities: List[RecentActivity]
	recent_interventions: List[RecentIntervention]
	barrier_usage: List[NamedCount]
	style_usage: List[StyleCount]
	activities_per_month: List[MonthCount]


def last_months(today: date, months: int = MONTHS_BACK) -> List[Tuple[int, int]]:
	"""(year, month) pairs for the last ``months`` months, oldest first, ending at ``today``."""
	out = []
	year, month = today.year, today.month
	for _ in range(months):
		out.append((year, month))
		month -= 1
		if month == 0:
			year, month = year - 1, 12
	return out[::-1]


def monthly_counts(timestamps: Iterable[datetime], today: date, months: int = MONTHS_BACK) -> List[MonthCount]:
	window = last_months(today, months)
	counts = Counter((t.year, t.month) for t in timestamps)
	return [MonthCount(month=MONTH_NAMES[m - 1], count=counts.get((y, m), 0)) for y, m in window]


def _name_or_default(entry_id: str, collection) -> str:
	name = lookup_name(entry_id, collection)
	return NO_NAME if name == UNKNOWN_NAME or not name else name


@router.get("", response_model=DashboardOut)
def dashboard(today: Optional[date] = None, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	today = today or datetime.utcnow().date()

	counts = Counts(
		activities=db.query(Activity).count(),
		barriers=db.query(Barrier).count(),
		interventions=db.query(Intervention).count(),
		students=db.query(Student).count(),
	)

	recent_activities = [
		RecentActivity(id=a.id, name=a.name, created_at=a.created_at)
		for a in db.query(Activity).order_by(Activity.created_at.desc()).limit(RECENT_LIMIT)
	]

	interventions = db.query(Intervention).order_by(Intervention.date.desc()).limit(RECENT_LIMIT).all()
	students = db.query(Student.id, Student.name).all()
	activities = db.query(Activity.id, Activity.name).all()
	recent_interventions = [
		RecentIntervention(
			id=i.id,
			date=i.date,
			student_name=_name_or_default(i.student_id, students),
			activity_name=_name_or_default(i.activity_id, activities),
		)
		for i in interventions
	]

	barrier_counts = Counter(r.barrier_id for r in db.query(ActivityBarrier.barrier_id))
	barrier_usage = sorted(
		(NamedCount(id=b.id, name=b.name, count=barrier_counts.get(b.id, 0)) for b in db.query(Barrier).order_by(Barrier.name)),
		key=lambda c: c.count,
		reverse=True,
	)

	style_counts = Counter(r.learning_style_id for r in db.query(ActivityLearningStyle.learning_style_id))
	style_usage = sorted(
		(
			StyleCount(id=s.id, name=s.name, count=style_counts.get(s.id, 0), color=s.color or DEFAULT_STYLE_COLOR)
			for s in db.query(LearningStyle).order_by(LearningStyle.name)
		),
		key=lambda c: c.count,
		reverse=True,
	)

	start_year, start_month = last_months(today)[0]
	since = datetime(start_year, start_month, 1)
	created = [r.created_at for r in db.query(Activity.created_at).filter(Activity.created_at >= since)]

	return DashboardOut(
		counts=counts,
		recent_activities=recent_activities,
		recent_interventions=recent_interventions,
		barrier_usage=barrier_usage,
		style_usage=style_usage,
		activities_per_month=monthly_counts(created, today),
	)
