"""Tools package: text, path and id utilities shared by the stores."""

from tools.text_utils import (
    now_iso,
    random_id,
    strip_html,
    count_words,
    slugify,
    safe_file_name,
    normalize_path,
    normalize_folder_path,
    join_path,
    parse_int_prefix,
)

__all__ = [
    "now_iso",
    "random_id",
    "strip_html",
    "count_words",
    "slugify",
    "safe_file_name",
    "normalize_path",
    "normalize_folder_path",
    "join_path",
    "parse_int_prefix",
]
