"""Prompt templating helpers."""
from __future__ import annotations
import re
from pathlib import Path

CODE_TEMPLATE = "Write {{language}} code for: {{input}}\nOnly respond with code, no explanations."
_PLACEHOLDER = re.compile(r"\{\{(input|language)\}\}")

def load_template(path: str | None = None) -> str:
    """
    Load a prompt template file, or the built-in code template.

    Args:
        path: Path to template. ``None`` selects CODE_TEMPLATE.
    """
    if path is None:
        return CODE_TEMPLATE
    return Path(path).read_text(encoding="utf-8")

def render_prompt(template: str, user_input: str, language: str) -> str:
    """
    Render user input and target language into the template.

    Args:
        template: Template content containing {{input}} and {{language}}.
        user_input: Natural-language request.
        language: Target programming language.

    Returns:
        Rendered prompt. Placeholders inside the substituted values are left as is.
    """
    values = {"input": user_input, "language": language}
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], template)
