"""Preview site: Handlebars pages rendered from a sample UI model."""

from uibundle.core.services.preview.pages import build_preview_pages
from uibundle.core.services.preview.templates import TemplateRegistry

__all__ = ["TemplateRegistry", "build_preview_pages"]
