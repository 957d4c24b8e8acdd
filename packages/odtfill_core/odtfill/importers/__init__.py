"""
Importers for placeholder data.
"""

from .data_importer import element_to_dict, load_data, parse_json, parse_xml

__all__ = [
    "load_data",
    "parse_json",
    "parse_xml",
    "element_to_dict",
]
