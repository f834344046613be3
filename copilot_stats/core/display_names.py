"""
Display names for categorical keys.

Maps raw language, model and feature keys from the usage export to
human-readable labels. Lookups are case-insensitive; unknown keys are
shown as-is.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

UNKNOWN = "Unknown"


class DisplayNames(Protocol):
    """Anything that can label language, model and feature keys."""

    def language(self, key: Optional[str]) -> str: ...

    def model(self, key: Optional[str]) -> str: ...

    def feature(self, key: Optional[str]) -> str: ...


@dataclass(frozen=True)
class DisplayNameTable:
    """Fixed lookup tables for display names."""
    languages: Dict[str, str]
    models: Dict[str, str]
    features: Dict[str, str]

    def language(self, key: Optional[str]) -> str:
        return _lookup(self.languages, key)

    def model(self, key: Optional[str]) -> str:
        return _lookup(self.models, key)

    def feature(self, key: Optional[str]) -> str:
        return _lookup(self.features, key)


def _lookup(table: Dict[str, str], key: Optional[str]) -> str:
    if key is None:
        return UNKNOWN
    return table.get(key.lower(), key)


DEFAULT_DISPLAY_NAMES = DisplayNameTable(
    languages={
        "javascript": "JavaScript",
        "typescript": "TypeScript",
        "typescriptreact": "TypeScript React",
        "javascriptreact": "JavaScript React",
        "powershell": "PowerShell",
        "python": "Python",
        "csharp": "C#",
        "java": "Java",
        "cpp": "C++",
        "c": "C",
        "php": "PHP",
        "ruby": "Ruby",
        "go": "Go",
        "rust": "Rust",
        "swift": "Swift",
        "kotlin": "Kotlin",
        "scala": "Scala",
        "html": "HTML",
        "css": "CSS",
        "scss": "SCSS",
        "less": "LESS",
        "json": "JSON",
        "xml": "XML",
        "yaml": "YAML",
        "yml": "YAML",
        "markdown": "Markdown",
        "sql": "SQL",
        "dockerfile": "Dockerfile",
        "sh": "Shell Script",
        "bash": "Bash",
        "zsh": "Zsh",
        "fish": "Fish",
        "dotenv": ".env",
        "pip-requirements": "Requirements.txt",
        "github-actions-workflow": "GitHub Actions",
        "oracle-sql": "Oracle SQL",
        "mermaid": "Mermaid",
        "vue": "Vue.js",
        "svelte": "Svelte",
        "angular": "Angular",
        "react": "React",
        "unknown": UNKNOWN,
    },
    models={
        "gpt-4": "GPT-4",
        "gpt-4.1": "GPT-4.1",
        "gpt-4o": "GPT-4o",
        "claude-3.5-sonnet": "Claude 3.5 Sonnet",
        "claude-3.7-sonnet": "Claude 3.7 Sonnet",
        "claude-4.0-sonnet": "Claude 4.0 Sonnet",
        "claude-sonnet": "Claude Sonnet",
        "claude-haiku": "Claude Haiku",
        "claude-opus": "Claude Opus",
        "unknown": UNKNOWN,
    },
    features={
        "code_completion": "Code Completion",
        "chat": "Chat Assistant",
        "chat_inline": "Inline Chat",
        "chat_panel_ask_mode": "Chat Panel - Ask Mode",
        "chat_panel_edit_mode": "Chat Panel - Edit Mode",
        "chat_panel_agent_mode": "Chat Panel - Agent Mode",
        "chat_panel_unknown_mode": "Chat Panel - Unknown Mode",
        "chat_panel_custom_mode": "Chat Panel - Custom Mode",
        "code_generation": "Code Generation",
        "code_review": "Code Review",
        "code_explanation": "Code Explanation",
        "test_generation": "Test Generation",
        "documentation": "Documentation",
        "refactoring": "Refactoring",
    },
)
