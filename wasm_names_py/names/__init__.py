"""
Name section model and codec.
"""

from .structures import (
    NameType, NameMap, NamePayload,
    ModuleNameSection, FunctionNameSection, LocalNameSection,
    read_name_map, write_name_map
)
from .name_section import (
    NameSection,
    read_name_section, write_name_section,
    read_name_sections, write_name_sections
)

__all__ = [
    'NameType', 'NameMap', 'NamePayload',
    'ModuleNameSection', 'FunctionNameSection', 'LocalNameSection',
    'read_name_map', 'write_name_map',
    'NameSection',
    'read_name_section', 'write_name_section',
    'read_name_sections', 'write_name_sections',
]
