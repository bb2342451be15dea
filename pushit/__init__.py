"""
pushit

AI-powered commit messages for the pending changes in a git working tree.
"""

import re

__version__ = "1.0.0"

# Centralized commit types - single source of truth
# Used by: prompts/builder.py (template), llm/sanitizer.py (grammar), output (colors)
COMMIT_TYPES = {
    'feat': 'A new feature for the user',
    'fix': 'A bug fix for the user',
    'docs': 'Documentation only changes',
    'style': 'Formatting, whitespace, no change in meaning',
    'refactor': 'Code restructuring that neither fixes a bug nor adds a feature',
    'perf': 'Performance improvement',
    'test': 'Adding missing tests or correcting existing tests',
    'build': 'Build system or external dependency changes',
    'ci': 'CI configuration files and scripts',
    'chore': "Other changes that don't modify source or test files",
    'revert': 'Reverts a previous commit',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

# type[(scope)][!]:
CONVENTIONAL_PREFIX = rf'(?P<type>{TYPES_PATTERN})(?:\([^)]+\))?!?:'

# type[(scope)][!]: description
CONVENTIONAL_RE = re.compile(rf'\b{CONVENTIONAL_PREFIX}\s*\S.*')
