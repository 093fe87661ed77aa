# Utils package - External clients, parsing and content fetching
from .parsing.json import extract_json, repair_and_parse_json
from .scraper import fetch_content, fetch_rendered_content

__all__ = [
    "extract_json",
    "repair_and_parse_json",
    "fetch_content",
    "fetch_rendered_content",
]
