"""Importers for XMI system models and pattern templates."""

from .xmi_parser import XMIParser, parse_xmi
from .template_parser import TemplateParser, parse_templates

__all__ = ['XMIParser', 'parse_xmi', 'TemplateParser', 'parse_templates']
