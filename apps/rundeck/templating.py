"""Rendering of the PagerDuty note / Slack message text.

Templates are Jinja2 strings rendered with:
- execution_link: the Rundeck execution permalink ("" when Rundeck omitted it)
- action_id: id of the invoking action
- job_id: Rundeck job id
- dedup_key: PagerDuty dedup key, or None on the Slack path

render_template raises ValueError on an invalid template or when rendering
fails (undefined variable, type error in an expression).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jinja2

logger = logging.getLogger(__name__)

DEFAULT_NOTE_TEMPLATE = "Rundeck job for the alert is triggered. Link: {{ execution_link }}"

_JINJA_ENV = jinja2.Environment(
    autoescape=False,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=False,
)


def compile_template(template_str: str) -> jinja2.Template:
    """Compile a template string, raising ValueError on syntax errors."""
    try:
        return _JINJA_ENV.from_string(template_str)
    except jinja2.TemplateSyntaxError as e:
        raise ValueError(f"Template syntax error: {e}") from e


def render_template(template_str: Optional[str], context: Dict[str, Any]) -> str:
    """Render a note template with the provided context.

    Args:
        template_str: Jinja2 template; falls back to DEFAULT_NOTE_TEMPLATE when falsy
        context: mapping of variables for the template

    Returns:
        Rendered string
    """
    tmpl = compile_template(template_str or DEFAULT_NOTE_TEMPLATE)
    try:
        return tmpl.render(**(context or {}))
    except Exception as e:
        # Runtime errors too, e.g. arithmetic on a string variable
        logger.debug("render_template: failed to render template: %s", e)
        raise ValueError(f"Template rendering error: {e}") from e
