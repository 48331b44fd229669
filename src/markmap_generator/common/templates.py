"""Prompt templating helpers."""
from __future__ import annotations
from pathlib import Path

DEFAULT_TEMPLATE_PATH = Path(__file__).with_name("prompt_template.txt")

def load_template(path: str | Path = DEFAULT_TEMPLATE_PATH) -> str:
    """
    Load a prompt template file.

    Args:
        path: Path to template. Defaults to the markmap prompt shipped
            with the package.
    """
    return Path(path).read_text(encoding="utf-8")

def render_prompt(template: str, user_input: str) -> str:
    """
    Render user input into the template.

    Args:
        template: Template content containing {{input}}.
        user_input: Input string, inserted verbatim.

    Returns:
        Rendered prompt.
    """
    return template.replace("{{input}}", user_input)

def build_prompt(text: str) -> str:
    """Render the markmap prompt around the user's text."""
    return render_prompt(load_template(), text)
