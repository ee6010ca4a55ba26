"""Structured template rendering with Jinja2."""
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)

from scrollsmith.core.errors import RenderError
from scrollsmith.core.logger import get_logger
from scrollsmith.renderers.base import Renderer

logger = get_logger(__name__)

ANSI_PATTERN = re.compile(r"\[((style:(?P<style>[rbdius]+))|(color:(?P<color>[0rgybmcw]+)))\]")

ANSI_STYLES = {
    'r': '00',
    'b': '01',
    'd': '02',
    'i': '03',
    'u': '04',
    's': '09',
}

ANSI_COLORS = {
    '0': '30',
    'r': '31',
    'g': '32',
    'y': '33',
    'b': '34',
    'm': '35',
    'c': '36',
    'w': '37',
}


def format_ansi(value: Any) -> str:
    """Replace ``[style:..]`` and ``[color:..]`` markers with ANSI escape text.

    The escape is written as the literal text ``\\u001b[<codes>m`` so the
    output can be embedded in string literals of generated sources::

        "[color:g]ok[style:r]" -> "\\u001b[32mok\\u001b[00m"
    """
    def replace(match: re.Match) -> str:
        if match.group('style'):
            codes = [ANSI_STYLES[ch] for ch in match.group('style')]
        else:
            codes = [ANSI_COLORS[ch] for ch in match.group('color')]
        return f"\\u001b[{';'.join(codes)}m"

    return ANSI_PATTERN.sub(replace, str(value))


def uuid_v4() -> str:
    return str(uuid.uuid4())


def now() -> datetime:
    return datetime.now(timezone.utc)


class JinjaRenderer(Renderer):
    """Renders structured templates against one shared context."""

    def __init__(self, values: Dict[str, Any], templates: Dict[str, str]):
        super().__init__(values, templates)
        self.env = Environment(
            loader=DictLoader(templates),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.env.filters['format_ansi'] = format_ansi
        self.env.globals['uuid_v4'] = uuid_v4
        self.env.globals['now'] = now

    def render(self, name: str) -> str:
        if name not in self.templates:
            raise RenderError(f"No template: {name}")

        try:
            template = self.env.get_template(name)
            return template.render(self.values)
        except TemplateSyntaxError as e:
            location = f"{e.name or name}, line {e.lineno}"
            raise RenderError(f"Failed to parse '{name}' ({location}). {e.message}") from e
        except TemplateNotFound as e:
            raise RenderError(f"Failed to render '{name}'. No template: {e.name}") from e
        except TemplateError as e:
            raise RenderError(f"Failed to render '{name}'. {error_chain(e)}") from e
        except Exception as e:
            logger.debug(f"Unexpected error rendering {name}: {e}")
            raise RenderError(f"Failed to render '{name}'. {error_chain(e)}") from e


def error_chain(error: BaseException) -> str:
    """Join the messages of an exception and its causes with '. '."""
    messages = []
    current = error
    while current is not None:
        text = str(current) or type(current).__name__
        if text not in messages:
            messages.append(text)
        current = current.__cause__ or current.__context__
    return '. '.join(messages)
