"""
Template rendering for ``@Render`` actions.

Wraps a Jinja2 environment over the configured ``view_dir``. The action
result (a mapping, or an object converted to one) is the template context;
the current request is exposed to templates as ``request``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

logger = logging.getLogger("rudder.templates")


class TemplateRenderer:
    """
    Async Jinja2 renderer.

    Args:
        view_dir: Directory containing the templates
        autoescape: Escape HTML in ``.html``/``.htm``/``.xml`` templates

    Example:
        renderer = TemplateRenderer("views")
        html = await renderer.render("photo.html", {"photo": photo})
    """

    def __init__(self, view_dir: Union[str, Path], *, autoescape: bool = True):
        self.view_dir = Path(view_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.view_dir)),
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ) if autoescape else False,
            enable_async=True,
        )

    def get_template(self, name: str) -> Template:
        return self.env.get_template(name)

    async def render(
        self,
        template_name: str,
        context: Optional[Mapping[str, Any]] = None,
        request: Any = None,
    ) -> str:
        """
        Render ``template_name`` with ``context``.

        Raises:
            jinja2.TemplateNotFound: If the template does not exist
        """
        variables = dict(context or {})
        variables.setdefault("request", request)
        template = self.get_template(template_name)
        logger.debug(f"Rendering template {template_name}")
        return await template.render_async(**variables)
