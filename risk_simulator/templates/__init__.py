"""Risk register templates."""

from .template_generator import SAMPLE_RISKS, TEMPLATE_FORMATS, TemplateGenerator, template_filename

__all__ = ['SAMPLE_RISKS', 'TEMPLATE_FORMATS', 'TemplateGenerator', 'template_filename']
