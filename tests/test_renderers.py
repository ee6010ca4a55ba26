"""Tests for the rendering backends."""
import pytest

from scrollsmith.core.errors import RenderError, ScriptError
from scrollsmith.renderers import RendererBuilder, format_ansi


class TestFormatAnsi:
    """Test bracket markup conversion to ANSI escape text."""

    def test_help_line(self):
        text = "[style:bu]-h, --help[style:r]\t\tDisplay help"
        assert format_ansi(text) == "\\u001b[01;04m-h, --help\\u001b[00m\t\tDisplay help"

    def test_color(self):
        assert format_ansi("[color:g]dev@pc[style:r]") == "\\u001b[32mdev@pc\\u001b[00m"

    def test_all_styles_and_colors(self):
        assert format_ansi("[style:rbdius]") == "\\u001b[00;01;02;03;04;09m"
        assert format_ansi("[color:0rgybmcw]") == "\\u001b[30;31;32;33;34;35;36;37m"

    def test_unknown_markup_is_left_alone(self):
        assert format_ansi("[style:x] [color:q] [link]") == "[style:x] [color:q] [link]"


class TestJinjaRenderer:
    """Test structured template rendering."""

    def _renderer(self, templates, values=None):
        return RendererBuilder().with_values(values or {}).with_templates(templates).build_jinja()

    def test_variables_in_shared_context(self):
        renderer = self._renderer(
            {'README.md.jinja': "# {{ project.name }}\n"},
            {'project': {'name': 'demo'}},
        )
        assert renderer.render('README.md.jinja') == "# demo\n"

    def test_trailing_newline_is_kept(self):
        renderer = self._renderer({'a.jinja': "line\n\n"})
        assert renderer.render('a.jinja') == "line\n\n"

    def test_format_ansi_filter(self):
        renderer = self._renderer({'a.jinja': "{{ '[color:r]red[style:r]' | format_ansi }}"})
        assert renderer.render('a.jinja') == "\\u001b[31mred\\u001b[00m"

    def test_uuid_and_now_globals(self):
        renderer = self._renderer({'a.jinja': "{{ uuid_v4() | length }} {{ now().year > 2000 }}"})
        assert renderer.render('a.jinja') == "36 True"

    def test_templates_can_include_each_other(self):
        renderer = self._renderer({
            'partials/header.jinja': "== {{ title }} ==",
            'page.jinja': "{% include 'partials/header.jinja' %}\nbody\n",
        }, {'title': 'Demo'})
        assert renderer.render('page.jinja') == "== Demo ==\nbody\n"

    def test_html_is_not_escaped(self):
        renderer = self._renderer({'a.jinja': "{{ markup }}"}, {'markup': '<b>&</b>'})
        assert renderer.render('a.jinja') == '<b>&</b>'

    def test_unknown_template(self):
        with pytest.raises(RenderError, match="No template: missing"):
            self._renderer({}).render('missing')

    def test_undefined_variable_is_an_error(self):
        renderer = self._renderer({'a.jinja': "{{ nope }}"})
        with pytest.raises(RenderError, match="Failed to render 'a.jinja'. 'nope' is undefined"):
            renderer.render('a.jinja')

    def test_syntax_error_carries_location(self):
        renderer = self._renderer({'a.jinja': "line\n{% if %}\n"})
        with pytest.raises(RenderError, match=r"a.jinja, line 2"):
            renderer.render('a.jinja')


class TestScriptRenderer:
    """Test script templates and path evaluation."""

    def test_render_collects_printed_output(self):
        renderer = (
            RendererBuilder()
            .with_value('items', ['a', 'b'])
            .with_template('list.txt.pyt', "for item in items:\n    template.println(f'- {item}')\n")
            .build_script()
        )
        assert renderer.render('list.txt.pyt') == "- a\n- b\n"

    def test_each_render_is_isolated(self):
        renderer = (
            RendererBuilder()
            .with_value('counter', [])
            .with_template('a.pyt', "counter.append(1)\ntemplate.print(len(counter))\n")
            .build_script()
        )
        assert renderer.render('a.pyt') == "1"
        assert renderer.render('a.pyt') == "1"

    def test_render_failure_is_located(self):
        renderer = RendererBuilder().with_template('x.pyt', "template.println('ok')\n1 / 0\n").build_script()
        with pytest.raises(ScriptError) as exc_info:
            renderer.render('x.pyt')
        assert exc_info.value.source_error.location == 'x.pyt'
        assert exc_info.value.source_error.line == 2

    def test_eval_path_interpolates_variables(self):
        renderer = RendererBuilder().with_value('service_name', 'api').build_script()
        assert renderer.eval_path('src/{service_name}/main.py.pyt') == 'src/api/main.py.pyt'

    def test_eval_path_without_placeholders(self):
        renderer = RendererBuilder().build_script()
        assert renderer.eval_path("it's/plain.txt") == "it's/plain.txt"

    def test_eval_path_escaped_braces(self):
        renderer = RendererBuilder().build_script()
        assert renderer.eval_path('{{literal}}.txt') == '{literal}.txt'

    def test_eval_string_template_requires_string(self):
        renderer = RendererBuilder().build_script()
        with pytest.raises(RenderError, match="must produce a string"):
            renderer.eval_string_template("1 + 1")

    def test_unknown_template(self):
        with pytest.raises(RenderError, match="No template"):
            RendererBuilder().build_script().render('missing.pyt')


class TestNoopRenderer:

    def test_source_is_returned_unchanged(self):
        source = "{{ not rendered }} {name}\n"
        renderer = RendererBuilder().with_template('raw.txt', source).build_noop()
        assert renderer.render('raw.txt') == source

    def test_unknown_template(self):
        with pytest.raises(RenderError, match="No template"):
            RendererBuilder().build_noop().render('missing')
