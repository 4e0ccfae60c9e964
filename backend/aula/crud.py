"""Small helpers shared by the CRUD routers."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Type

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session


log = logging.getLogger(__name__)


def get_or_404(db: Session, model: Type[Any], row_id: str, detail: str = "Registro no encontrado") -> Any:
	row = db.get(model, row_id)
	if row is None:
		raise HTTPException(status_code=404, detail=detail)
	return row


def ensure_owner(row: Any, user_id: str, field: str = "created_by") -> None:
	# Anyone signed in may read; only the creator may change or delete
	if getattr(row, field) != user_id:
		raise HTTPException(status_code=403, detail="Solo el creador puede modificar este registro")


def ensure_exist(db: Session, model: Type[Any], ids: Iterable[str], detail: str) -> None:
	wanted = set(ids)
	if not wanted:
		return
	found = {r.id for r in db.query(model.id).filter(model.id.in_(sorted(wanted)))}
	missing = wanted - found
	if missing:
		raise HTTPException(status_code=400, detail=f"{detail}: {', '.join(sorted(missing))}")


def commit_or_409(db: Session, detail: Optional[str] = None) -> None:
	try:
		db.commit()
	except IntegrityError as exc:
		db.rollback()
		log.warning("Integrity error on commit: %s", exc.orig)
		raise HTTPException(status_code=409, detail=detail or "El registro entra en conflicto con datos existentes")


def clean_text(value: Optional[str]) -> str:
	return (value or "").strip()
