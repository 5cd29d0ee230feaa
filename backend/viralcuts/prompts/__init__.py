"""
Centralized prompts for all AI services.
"""
from viralcuts.prompts.moments_prompts import (
    MOMENTS_SYSTEM_PROMPT,
    MOMENTS_USER_PROMPT_TEMPLATE,
)

__all__ = [
    # Viral moment detection
    "MOMENTS_SYSTEM_PROMPT",
    "MOMENTS_USER_PROMPT_TEMPLATE",
]
