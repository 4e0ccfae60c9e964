from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ..crud import clean_text, commit_or_409, ensure_owner, get_or_404
from ..db import get_db
from ..models import Student, Subject
from .auth import User, get_current_user


router = APIRouter(tags=["students"])


class StudentIn(BaseModel):
	name: str
	grade: str


class StudentPatch(BaseModel):
	name: Optional[str] = None
	grade: Optional[str] = None


class StudentOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	name: str
	grade: str
	created_by: str
	created_at: datetime


class SubjectIn(BaseModel):
	name: str


class SubjectOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	name: str


@router.get("/students", response_model=List[StudentOut])
def list_students(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return db.query(Student).order_by(Student.name).all()


@router.get("/students/{student_id}", response_model=StudentOut)
def get_student(student_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return get_or_404(db, Student, student_id, "Estudiante no encontrado")


@router.post("/students", response_model=StudentOut, status_code=201)
def create_student(req: StudentIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name, grade = clean_text(req.name), clean_text(req.grade)
	if not name or not grade:
		raise HTTPException(status_code=400, detail="El nombre y el grado son obligatorios")
	row = Student(name=name, grade=grade, created_by=user.id)
	db.add(row)
	commit_or_409(db)
	db.refresh(row)
	return row


@router.patch("/students/{student_id}", response_model=StudentOut)
def update_student(student_id: str, req: StudentPatch, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Student, student_id, "Estudiante no encontrado")
	ensure_owner(row, user.id)
	for field in ("name", "grade"):
		value = getattr(req, field)
		if value is not None:
			if not clean_text(value):
				raise HTTPException(status_code=400, detail="El nombre y el grado son obligatorios")
			setattr(row, field, clean_text(value))
	commit_or_409(db)
	db.refresh(row)
	return row


@router.delete("/students/{student_id}", status_code=204)
def delete_student(student_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	row = get_or_404(db, Student, student_id, "Estudiante no encontrado")
	ensure_owner(row, user.id)
	db.delete(row)
	commit_or_409(db)


# Subjects are only listed (for the registration form) and created

@router.get("/subjects", response_model=List[SubjectOut])
def list_subjects(db: Session = Depends(get_db)):
	return db.query(Subject).order_by(Subject.name).all()


@router.post("/subjects", response_model=SubjectOut, status_code=201)
def create_subject(req: SubjectIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	name = clean_text(req.name)
	if not name:
		raise HTTPException(status_code=400, detail="El nombre es obligatorio")
	row = Subject(name=name, created_by=user.id)
	db.add(row)
	commit_or_409(db)
	db.refresh(row)
	return row
