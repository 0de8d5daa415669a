# Utilities package

from .helpers import (
    generate_report_id,
    truncate_text,
    strip_code_fences,
    best_effort
)

__all__ = [
    "generate_report_id",
    "truncate_text",
    "strip_code_fences",
    "best_effort"
]
