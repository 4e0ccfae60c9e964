"""Activity selection helpers for the intervention wizard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from .schemas import Activity, MatchQuery


UNKNOWN_NAME = "Desconocido"


def filter_activities(
	activities: Sequence[Activity],
	target_barrier_id: str,
	target_learning_style_ids: Iterable[str],
) -> List[Activity]:
	"""Keep activities tagged with the barrier and with every selected style.

	Input order is preserved. An empty style selection matches every activity
	that has the barrier; deciding whether that selection is usable is up to
	the caller (see ``WizardSelection.ready``).
	"""

	wanted = set(target_learning_style_ids)
	return [
		activity
		for activity in activities
		if target_barrier_id in activity.barrier_ids and wanted <= set(activity.learning_style_ids)
	]


def match(activities: Sequence[Activity], query: MatchQuery) -> List[Activity]:
	return filter_activities(activities, query.target_barrier_id, query.target_learning_style_ids)


def _field(entry: Any, name: str) -> Any:
	if isinstance(entry, dict):
		return entry.get(name)
	return getattr(entry, name, None)


def lookup_name(entry_id: Optional[str], collection: Iterable[Any]) -> str:
	"""Name of the entry with ``entry_id``; ``"Desconocido"`` when it is missing."""

	for entry in collection or ():
		if _field(entry, "id") == entry_id:
			name = _field(entry, "name")
			return name if name is not None else UNKNOWN_NAME
	return UNKNOWN_NAME


def toggle_style(selected: Sequence[str], style_id: str) -> List[str]:
	if style_id in selected:
		return [s for s in selected if s != style_id]
	return [*selected, style_id]


@dataclass(slots=True)
class WizardSelection:
	barrier_id: Optional[str] = None
	style_ids: List[str] = field(default_factory=list)
	activity_id: Optional[str] = None

	@property
	def ready(self) -> bool:
		return bool(self.barrier_id) and len(self.style_ids) > 0

	def query(self) -> MatchQuery:
		if not self.ready:
			raise ValueError("Seleccione una barrera y al menos un estilo de aprendizaje")
		return MatchQuery(target_barrier_id=self.barrier_id, target_learning_style_ids=set(self.style_ids))

	def candidates(self, activities: Sequence[Activity]) -> List[Activity]:
		if not self.ready:
			return []
		return match(activities, self.query())


__all__ = [
	"UNKNOWN_NAME",
	"filter_activities",
	"match",
	"lookup_name",
	"toggle_style",
	"WizardSelection",
]
