from .enhancement import (
    EnhancementEngine,
    EnhancementRequest,
    context_section,
    format_transcript,
)
from .output_filter import OutputFilter
from .prompts import (
    ASSISTANT_MODE_PROMPT,
    ASSISTANT_PROMPT_ID,
    CUSTOM_PROMPT_TEMPLATE,
    DEFAULT_PROMPT_ID,
    EMAIL_PROMPT_ID,
    FIX_GRAMMAR_PROMPT_ID,
    Prompt,
    PromptIcon,
    PromptStore,
    load_predefined_templates,
)
from .rate_limiter import RateLimiter

__all__ = [
    "ASSISTANT_MODE_PROMPT",
    "ASSISTANT_PROMPT_ID",
    "CUSTOM_PROMPT_TEMPLATE",
    "DEFAULT_PROMPT_ID",
    "EMAIL_PROMPT_ID",
    "FIX_GRAMMAR_PROMPT_ID",
    "EnhancementEngine",
    "EnhancementRequest",
    "OutputFilter",
    "Prompt",
    "PromptIcon",
    "PromptStore",
    "RateLimiter",
    "context_section",
    "format_transcript",
    "load_predefined_templates",
]
