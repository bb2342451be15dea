"""Prompt Builder - Fill the commit prompt template from a repository snapshot."""

import logging
import re
from dataclasses import dataclass

from pushit import COMMIT_TYPES
from pushit.context import RepositorySnapshot

logger = logging.getLogger(__name__)

EMPTY_SLOT = "None"
TRUNCATION_MARKER = "\n... (truncated)"
MAX_PROMPT_CHARS = 60_000

SLOT_RE = re.compile(r'\{\{(\w+)\}\}')

_TYPE_LIST = "\n".join(f"    * `{name}`: {desc}." for name, desc in COMMIT_TYPES.items())

DEFAULT_TEMPLATE = f"""You are an expert Git commit message generator. Your sole task is to produce a single, concise, and conventionally formatted commit message subject line.

**Output Rules:**

1.  **Conventional Commits:** The output must strictly adhere to the Conventional Commits specification.
2.  **Format:** The entire output must be a single line in the format: `<type>(<optional-scope>): <description>`
3.  **Type:** The `<type>` must be one of the following:
{_TYPE_LIST}
4.  **Scope:** The `<optional-scope>` should be a noun describing a section of the codebase (e.g., `api`, `ui`, `auth`).
5.  **Description:** The `<description>` must:
    * Be a short summary of the code changes.
    * Be written in the imperative mood (e.g., "add feature" not "added feature").
    * Not be capitalized.
    * Not end with a period.
6.  **Conciseness:** The entire message must be 50 characters or less.
7.  **Purity:** The output must ONLY be the generated commit message string. Do not include any explanations, introductory text, or markdown formatting.

**Example of a valid output:**
`feat(auth): add user login endpoint`

**Project Information:**
{{{{project}}}}

**Recent commits (for style reference):**
{{{{commit_history}}}}

**Changed files:**
{{{{changed_files}}}}

**Git status:**
{{{{status}}}}

**Git diff (staged changes):**
{{{{diff}}}}

**File contents (for understanding context):**
{{{{file_contents}}}}
"""


@dataclass
class PromptConfig:
    """Template and size ceiling for the rendered prompt."""
    template: str = DEFAULT_TEMPLATE
    max_prompt_chars: int = MAX_PROMPT_CHARS


class PromptBuilder:
    """Renders a RepositorySnapshot into the generation prompt."""

    def build(self, snapshot: RepositorySnapshot, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig()
        prompt = self._fill(config.template, self._slot_values(snapshot))

        if len(prompt) > config.max_prompt_chars:
            logger.debug("prompt of %d chars cut to %d", len(prompt), config.max_prompt_chars)
            prompt = prompt[:config.max_prompt_chars] + TRUNCATION_MARKER
        return prompt

    def _fill(self, template: str, values: dict[str, str]) -> str:
        # Single pass, so slot-like text inside a diff is never substituted
        def replace(match: re.Match) -> str:
            name = match.group(1)
            if name not in values:
                return match.group(0)
            return values[name] or EMPTY_SLOT

        return SLOT_RE.sub(replace, template)

    def _slot_values(self, snapshot: RepositorySnapshot) -> dict[str, str]:
        return {
            'branch': snapshot.branch,
            'linked_issue': snapshot.linked_issue or "",
            'project': self._build_project_section(snapshot),
            'commit_history': "\n".join(snapshot.commit_history),
            'changed_files': "\n".join(snapshot.changed_files),
            'status': snapshot.status,
            'diff': snapshot.diff,
            'file_contents': self._build_file_contents_section(snapshot),
        }

    def _build_project_section(self, snapshot: RepositorySnapshot) -> str:
        project = snapshot.project
        lines = [f"- Type: {project.kind.value}"]
        if project.name:
            lines.append(f"- Name: {project.name}")
        if project.version:
            lines.append(f"- Version: {project.version}")
        lines.append(f"- Branch: {snapshot.branch}")
        if snapshot.linked_issue:
            lines.append(f"- Related Issue: #{snapshot.linked_issue}")
        return "\n".join(lines)

    def _build_file_contents_section(self, snapshot: RepositorySnapshot) -> str:
        return "\n\n".join(
            f"--- {path} ---\n{body}" for path, body in snapshot.file_contents.items()
        )
