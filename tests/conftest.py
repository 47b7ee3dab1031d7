import zipfile
from pathlib import Path
from typing import Dict, Optional, Union

import pytest

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
XDR_NS = "http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"

PNG_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-png"
JPG_BYTES = b"\xff\xd8\xffjpeg-ish"


def cell(ref: str, value: str, kind: Optional[str] = None) -> str:
	t = f' t="{kind}"' if kind else ""
	if kind == "inlineStr":
		return f'<c r="{ref}" t="inlineStr"><is><t>{value}</t></is></c>'
	return f'<c r="{ref}"{t}><v>{value}</v></c>'


def row(r: Optional[int], *cells: str) -> str:
	attr = f' r="{r}"' if r is not None else ""
	return f"<row{attr}>{''.join(cells)}</row>"


def sheet_xml(*rows: str) -> str:
	return (
		'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
		f'<worksheet xmlns="{MAIN_NS}" xmlns:r="{REL_NS}"><sheetData>{"".join(rows)}</sheetData></worksheet>'
	)


def shared_strings_xml(*items: str) -> str:
	"""Each item is the inner XML of one <si>."""
	body = "".join(f"<si>{item}</si>" for item in items)
	return f'<sst xmlns="{MAIN_NS}" count="{len(items)}" uniqueCount="{len(items)}">{body}</sst>'


def anchor_xml(zero_based_row: Union[int, str, None], rel_id: Optional[str], kind: str = "twoCellAnchor") -> str:
	frm = (
		f"<xdr:from><xdr:col>0</xdr:col><xdr:colOff>0</xdr:colOff>"
		f"<xdr:row>{zero_based_row}</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:from>"
		if zero_based_row is not None
		else ""
	)
	embed = f' r:embed="{rel_id}"' if rel_id else ""
	return (
		f"<xdr:{kind}>{frm}"
		f'<xdr:pic><xdr:nvPicPr><xdr:cNvPr id="2" name="Picture 1"/><xdr:cNvPicPr/></xdr:nvPicPr>'
		f"<xdr:blipFill><a:blip{embed}/><a:stretch><a:fillRect/></a:stretch></xdr:blipFill></xdr:pic>"
		f"<xdr:clientData/></xdr:{kind}>"
	)


def drawing_xml(*anchors: str) -> str:
	return (
		'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
		f'<xdr:wsDr xmlns:xdr="{XDR_NS}" xmlns:a="{A_NS}" xmlns:r="{REL_NS}">{"".join(anchors)}</xdr:wsDr>'
	)


def rels_xml(targets: Dict[str, str]) -> str:
	body = "".join(
		f'<Relationship Id="{rid}" Type="{REL_NS}/image" Target="{target}"/>'
		for rid, target in targets.items()
	)
	return f'<Relationships xmlns="{PKG_REL_NS}">{body}</Relationships>'


def workbook_parts(sheet_target: str = "worksheets/sheet1.xml") -> Dict[str, str]:
	return {
		"xl/workbook.xml": (
			f'<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">'
			'<sheets><sheet name="Data" sheetId="1" r:id="rId1"/></sheets></workbook>'
		),
		"xl/_rels/workbook.xml.rels": (
			f'<Relationships xmlns="{PKG_REL_NS}">'
			f'<Relationship Id="rId1" Type="{REL_NS}/worksheet" Target="{sheet_target}"/>'
			"</Relationships>"
		),
	}


def write_xlsx(path: Path, parts: Dict[str, Union[str, bytes]]) -> Path:
	with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as z:
		for name, data in parts.items():
			z.writestr(name, data)
	return path


@pytest.fixture
def make_workbook(tmp_path):
	def _make(parts: Dict[str, Union[str, bytes]], name: str = "book.xlsx") -> Path:
		return write_xlsx(tmp_path / name, parts)

	return _make


@pytest.fixture
def example_parts() -> Dict[str, Union[str, bytes]]:
	"""Header plus rows 2-3; row 2 (Acme) has a picture anchored at zero-based row 1."""
	return {
		"xl/sharedStrings.xml": shared_strings_xml(
			"<t>Name</t>", "<t>Type</t>", "<t>Acme</t>", "<t>Tool</t>", "<t>Globex</t>",
		),
		"xl/worksheets/sheet1.xml": sheet_xml(
			row(1, cell("A1", "0", "s"), cell("B1", "1", "s")),
			row(2, cell("A2", "2", "s"), cell("B2", "3", "s"), cell("C2", "https://acme.example")),
			row(3, cell("A3", "4", "s"), cell("B3", "3", "s")),
		),
		"xl/drawings/drawing1.xml": drawing_xml(anchor_xml(1, "rId1")),
		"xl/drawings/_rels/drawing1.xml.rels": rels_xml({"rId1": "../media/image1.png"}),
		"xl/media/image1.png": PNG_BYTES,
	}
