"""Prompt Construction Package"""

from pushit.prompts.builder import PromptBuilder, PromptConfig, DEFAULT_TEMPLATE, MAX_PROMPT_CHARS

__all__ = ["PromptBuilder", "PromptConfig", "DEFAULT_TEMPLATE", "MAX_PROMPT_CHARS"]
