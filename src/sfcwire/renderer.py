from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from sfcwire.compiler.codegen.js import js_string

# Templating environment for generated modules and diagnostics
_env = Environment(
    loader=PackageLoader("sfcwire", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["js"] = js_string


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Render a Jinja2 template with the given context.

    Args:
        template_name: Name of the template relative to src/sfcwire/templates/
        context: Dictionary of variables to pass to the template

    Returns:
        Rendered text
    """
    template = _env.get_template(template_name)
    return template.render(**context)
