from .extractor import ExtractionReport, WorkbookFormatError, XlsxGalleryExtractor
from .gallery import GalleryState, load_gallery
from .records import GalleryRecord
from .tools import convert_workbook

__all__ = [
	"ExtractionReport",
	"GalleryRecord",
	"GalleryState",
	"WorkbookFormatError",
	"XlsxGalleryExtractor",
	"convert_workbook",
	"load_gallery",
]

__version__ = "0.1.0"
