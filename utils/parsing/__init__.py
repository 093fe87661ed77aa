# Parsing subpackage - model output parsing utilities
from .json import extract_json, repair_and_parse_json, strip_code_fences

__all__ = [
    "extract_json",
    "repair_and_parse_json",
    "strip_code_fences",
]
