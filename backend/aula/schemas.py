"""Typed shapes shared by the parser, the matcher and the routers."""

from __future__ import annotations

from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class Barrier(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	name: str
	description: str = ""


class LearningStyle(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: str
	name: str
	description: str = ""
	color: Optional[str] = None


class ActivityStep(BaseModel):
	description: str
	duration: str


class ActivityDevelopment(BaseModel):
	description: str = ""
	steps: List[ActivityStep] = Field(default_factory=list)


class GeneratedActivity(BaseModel):
	name: str
	objective: str
	materials: List[str]
	development: ActivityDevelopment


class Activity(BaseModel):
	"""Activity as seen by the wizard: content plus the ids it is tagged with."""

	id: str
	name: str
	objective: str = ""
	materials: List[str] = Field(default_factory=list)
	development: ActivityDevelopment = Field(default_factory=ActivityDevelopment)
	barrier_ids: Set[str] = Field(default_factory=set)
	learning_style_ids: Set[str] = Field(default_factory=set)


class MatchQuery(BaseModel):
	target_barrier_id: str
	target_learning_style_ids: Set[str] = Field(default_factory=set)


__all__ = [
	"Barrier",
	"LearningStyle",
	"ActivityStep",
	"ActivityDevelopment",
	"GeneratedActivity",
	"Activity",
	"MatchQuery",
]
