"""Input parsing layer."""
from overtime_tool.parsers.entries_parser import load_entries, parse_entries
from overtime_tool.parsers.config_parser import load_snapshot, parse_snapshot

__all__ = ["load_entries", "parse_entries", "load_snapshot", "parse_snapshot"]
