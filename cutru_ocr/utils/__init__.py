"""
Utility functions for the residence-registration OCR application.
"""

from .ai_parser import (
    parse_ai_response,
    strip_code_fences,
    recover_complete_objects,
)

from .file_utils import (
    safe_stem,
    iter_images,
    expand_image_inputs,
)

from .image_utils import (
    ImagePayload,
    guess_mime_from_bytes,
    encode_image_bytes,
    load_image_payload,
)

from .timing import (
    timed_operation,
    format_duration,
    Timer,
)

__all__ = [
    # Response parsing
    "parse_ai_response",
    "strip_code_fences",
    "recover_complete_objects",

    # File utilities
    "safe_stem",
    "iter_images",
    "expand_image_inputs",

    # Image utilities
    "ImagePayload",
    "guess_mime_from_bytes",
    "encode_image_bytes",
    "load_image_payload",

    # Timing utilities
    "timed_operation",
    "format_duration",
    "Timer",
]
