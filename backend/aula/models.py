from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey
from .db import Base


def _uuid() -> str:
	return str(uuid.uuid4())


class Profile(Base):
	__tablename__ = "profiles"
	# One profile per registered teacher; the id is the owner id stamped on every row
	id = Column(String(36), primary_key=True, default=_uuid)
	email = Column(String(256), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	name = Column(String(128), nullable=True)
	lastname = Column(String(128), nullable=True)
	subject = Column(String(128), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	session_id = Column(String(64), primary_key=True)
	profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Subject(Base):
	__tablename__ = "subjects"
	id = Column(String(36), primary_key=True, default=_uuid)
	name = Column(String(128), nullable=False)
	created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Barrier(Base):
	__tablename__ = "barriers"
	id = Column(String(36), primary_key=True, default=_uuid)
	name = Column(String(256), nullable=False)
	description = Column(Text, nullable=False, default="")
	created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class LearningStyle(Base):
	__tablename__ = "learning_styles"
	id = Column(String(36), primary_key=True, default=_uuid)
	name = Column(String(256), nullable=False)
	description = Column(Text, nullable=False, default="")
	color = Column(String(32), nullable=True)  # display hint only
	created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Activity(Base):
	__tablename__ = "activities"
	id = Column(String(36), primary_key=True, default=_uuid)
	name = Column(String(256), nullable=False)
	objective = Column(Text, nullable=False, default="")
	# Free-form JSON; read through storage.normalize_*
	materials = Column(JSON, nullable=True)
	development = Column(JSON, nullable=False)
	subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
	created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ActivityBarrier(Base):
	__tablename__ = "activity_barriers"
	activity_id = Column(String(36), ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True)
	barrier_id = Column(String(36), ForeignKey("barriers.id", ondelete="CASCADE"), primary_key=True)
	created_by = Column(String(36), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=True)


class ActivityLearningStyle(Base):
	__tablename__ = "activity_learning_styles"
	activity_id = Column(String(36), ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True)
	learning_style_id = Column(String(36), ForeignKey("learning_styles.id", ondelete="CASCADE"), primary_key=True)
	created_by = Column(String(36), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=True)


class Student(Base):
	__tablename__ = "students"
	id = Column(String(36), primary_key=True, default=_uuid)
	name = Column(String(256), nullable=False)
	grade = Column(String(64), nullable=False)
	created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Intervention(Base):
	__tablename__ = "interventions"
	id = Column(String(36), primary_key=True, default=_uuid)
	activity_id = Column(String(36), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False)
	student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
	teacher_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
	date = Column(DateTime, default=datetime.utcnow, nullable=False)
	observations = Column(Text, nullable=True)
	subject = Column(String(128), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class InterventionBarrier(Base):
	__tablename__ = "intervention_barriers"
	intervention_id = Column(String(36), ForeignKey("interventions.id", ondelete="CASCADE"), primary_key=True)
	barrier_id = Column(String(36), ForeignKey("barriers.id", ondelete="CASCADE"), primary_key=True)


class InterventionLearningStyle(Base):
	__tablename__ = "intervention_learning_styles"
	intervention_id = Column(String(36), ForeignKey("interventions.id", ondelete="CASCADE"), primary_key=True)
	learning_style_id = Column(String(36), ForeignKey("learning_styles.id", ondelete="CASCADE"), primary_key=True)


class InterventionComment(Base):
	__tablename__ = "intervention_comments"
	id = Column(String(36), primary_key=True, default=_uuid)
	intervention_id = Column(String(36), ForeignKey("interventions.id", ondelete="CASCADE"), nullable=False, index=True)
	author_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
	content = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
