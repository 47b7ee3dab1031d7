#!/usr/bin/env python3
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .records import GalleryRecord


def ensure_parent(path: Path) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)


def write_records_json(records: Iterable[GalleryRecord], output_file: Path, indent: int = 2) -> int:
	rows: List[Dict[str, str]] = [r.to_dict() for r in records]
	output_file = Path(output_file)
	ensure_parent(output_file)
	with output_file.open("w", encoding="utf-8") as f:
		json.dump(rows, f, indent=indent, ensure_ascii=False)
	return len(rows)


def load_records_json(path: Path) -> Any:
	with Path(path).open("r", encoding="utf-8") as f:
		return json.load(f)


def write_report_json(report: Dict[str, Any], output_file: Path) -> str:
	output_file = Path(output_file)
	ensure_parent(output_file)
	with output_file.open("w", encoding="utf-8") as f:
		json.dump(report, f, indent=2, ensure_ascii=False, default=str)
	return str(output_file)
