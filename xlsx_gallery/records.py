#!/usr/bin/env python3
"""Gallery record shared by the extractor output and the viewer input."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

RECORD_FIELDS = ("name", "type", "website", "description", "image")

# Spreadsheet column -> record field
COLUMN_FIELDS: Dict[str, str] = {
	"A": "name",
	"B": "type",
	"C": "website",
	"D": "description",
}


@dataclass(frozen=True)
class GalleryRecord:
	name: str = ""
	type: str = ""
	website: str = ""
	description: str = ""
	image: str = ""

	@classmethod
	def from_mapping(cls, obj: Any) -> "GalleryRecord":
		"""Project one JSON entry; anything missing or falsy becomes ``""``."""
		if not isinstance(obj, dict):
			return cls()
		values = {}
		for key in RECORD_FIELDS:
			raw = obj.get(key)
			values[key] = raw if isinstance(raw, str) else (str(raw) if raw else "")
		return cls(**values)

	def to_dict(self) -> Dict[str, str]:
		return asdict(self)
