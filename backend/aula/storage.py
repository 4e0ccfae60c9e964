"""Conversion between stored rows and the typed activity shapes.

``materials`` and ``development`` are JSON columns written by several clients
(the activity form, the generator, older imports), so they arrive as dicts,
lists, JSON strings or plain text. Everything that reads them goes through
``normalize_materials`` / ``normalize_development`` once, here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from . import models
from .schemas import Activity, ActivityDevelopment, ActivityStep, GeneratedActivity


log = logging.getLogger(__name__)


def _maybe_json(value: Any) -> Any:
	if isinstance(value, (bytes, bytearray)):
		value = value.decode("utf-8", errors="replace")
	if isinstance(value, str):
		stripped = value.strip()
		if stripped[:1] in ("{", "[", '"'):
			try:
				return json.loads(stripped)
			except ValueError:
				log.debug("Stored JSON field is not valid JSON; treating as text")
	return value


def normalize_materials(value: Any) -> List[str]:
	value = _maybe_json(value)
	if value is None:
		return []
	if isinstance(value, str):
		return [line.strip() for line in value.splitlines() if line.strip()]
	if isinstance(value, dict):
		value = value.get("items") or value.get("materials") or []
	if isinstance(value, (list, tuple)):
		return [str(item).strip() for item in value if item is not None and str(item).strip()]
	return [str(value)]


def _step_duration(raw: Dict[str, Any]) -> str:
	duration = raw.get("duration")
	if duration is not None and str(duration).strip():
		return str(duration).strip()
	# Activity form shape: durationMin / durationMax / durationUnit
	lo = raw.get("durationMin")
	hi = raw.get("durationMax")
	unit = raw.get("durationUnit") or "minutos"
	if lo is not None and hi is not None and lo != hi:
		return f"{lo}-{hi} {unit}"
	if lo is not None or hi is not None:
		return f"{lo if lo is not None else hi} {unit}"
	return ""


def _normalize_step(raw: Any) -> Optional[ActivityStep]:
	if isinstance(raw, str):
		description, duration = raw.strip(), ""
	elif isinstance(raw, dict):
		description = str(raw.get("description") or "").strip()
		duration = _step_duration(raw)
	else:
		return None
	if not description:
		return None
	return ActivityStep(description=description, duration=duration)


def normalize_development(value: Any) -> ActivityDevelopment:
	value = _maybe_json(value)
	if value is None:
		return ActivityDevelopment()
	if isinstance(value, str):
		return ActivityDevelopment(description=value.strip())
	if isinstance(value, list):
		raw_steps: Iterable[Any] = value
		description = ""
	elif isinstance(value, dict):
		raw_steps = value.get("steps") or []
		description = str(value.get("description") or "").strip()
	else:
		return ActivityDevelopment(description=str(value))
	steps = [step for step in (_normalize_step(s) for s in raw_steps) if step is not None]
	return ActivityDevelopment(description=description, steps=steps)


def development_to_json(development: ActivityDevelopment) -> Dict[str, Any]:
	return development.model_dump()


def tag_ids(db: Session, activity_ids: Sequence[str]) -> tuple[Dict[str, set], Dict[str, set]]:
	"""Barrier and learning-style ids per activity, from the join tables."""

	barriers: Dict[str, set] = {aid: set() for aid in activity_ids}
	styles: Dict[str, set] = {aid: set() for aid in activity_ids}
	if not activity_ids:
		return barriers, styles
	for row in db.query(models.ActivityBarrier).filter(models.ActivityBarrier.activity_id.in_(activity_ids)):
		barriers[row.activity_id].add(row.barrier_id)
	for row in db.query(models.ActivityLearningStyle).filter(models.ActivityLearningStyle.activity_id.in_(activity_ids)):
		styles[row.activity_id].add(row.learning_style_id)
	return barriers, styles


def activity_from_row(row: models.Activity, barrier_ids: Iterable[str] = (), learning_style_ids: Iterable[str] = ()) -> Activity:
	return Activity(
		id=row.id,
		name=row.name,
		objective=row.objective or "",
		materials=normalize_materials(row.materials),
		development=normalize_development(row.development),
		barrier_ids=set(barrier_ids),
		learning_style_ids=set(learning_style_ids),
	)


def load_activities(db: Session, rows: Optional[Sequence[models.Activity]] = None) -> List[Activity]:
	if rows is None:
		rows = db.query(models.Activity).order_by(models.Activity.created_at.desc()).all()
	barriers, styles = tag_ids(db, [r.id for r in rows])
	return [activity_from_row(r, barriers[r.id], styles[r.id]) for r in rows]


def set_activity_tags(
	db: Session,
	activity_id: str,
	barrier_ids: Iterable[str],
	learning_style_ids: Iterable[str],
	user_id: Optional[str] = None,
) -> None:
	db.query(models.ActivityBarrier).filter(models.ActivityBarrier.activity_id == activity_id).delete()
	db.query(models.ActivityLearningStyle).filter(models.ActivityLearningStyle.activity_id == activity_id).delete()
	for barrier_id in dict.fromkeys(barrier_ids):
		db.add(models.ActivityBarrier(activity_id=activity_id, barrier_id=barrier_id, created_by=user_id))
	for style_id in dict.fromkeys(learning_style_ids):
		db.add(models.ActivityLearningStyle(activity_id=activity_id, learning_style_id=style_id, created_by=user_id))


def save_generated_activity(
	db: Session,
	activity: GeneratedActivity,
	user_id: str,
	barrier_ids: Iterable[str],
	learning_style_ids: Iterable[str],
) -> models.Activity:
	"""Insert a generated activity and tag it; commits on success, rolls back on error."""

	row = models.Activity(
		name=activity.name,
		objective=activity.objective,
		materials=list(activity.materials),
		development=development_to_json(activity.development),
		created_by=user_id,
	)
	try:
		db.add(row)
		db.flush()
		set_activity_tags(db, row.id, barrier_ids, learning_style_ids, user_id=user_id)
		db.commit()
	except Exception:
		db.rollback()
		raise
	db.refresh(row)
	log.info("Saved generated activity %s (%s)", row.id, row.name)
	return row


__all__ = [
	"normalize_materials",
	"normalize_development",
	"development_to_json",
	"tag_ids",
	"activity_from_row",
	"load_activities",
	"set_activity_tags",
	"save_generated_activity",
]
