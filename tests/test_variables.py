"""Tests for variable directory loading."""
import pytest

from conftest import write_tree
from scrollsmith.core.errors import ScriptError, VariablesError
from scrollsmith.core.variables import load_overrides, load_variables


class TestLoadVariables:
    """Test merging of variable files into one tree."""

    def test_missing_directory_yields_empty_mapping(self, tmp_path):
        assert load_variables(tmp_path / "variables") == {}

    def test_file_stem_becomes_key(self, tmp_path):
        write_tree(tmp_path, {"project.yaml": "name: demo\n"})
        assert load_variables(tmp_path) == {'project': {'name': 'demo'}}

    def test_directories_nest(self, tmp_path):
        write_tree(tmp_path, {"a/b/c.yaml": "value: 1\n"})
        assert load_variables(tmp_path) == {'a': {'b': {'c': {'value': 1}}}}

    def test_scalar_file(self, tmp_path):
        write_tree(tmp_path, {"version.yml": "1.2.0\n"})
        assert load_variables(tmp_path) == {'version': '1.2.0'}

    def test_files_merge_in_lexical_order(self, tmp_path):
        write_tree(tmp_path, {
            "settings/a.yaml": "x: 1\n",
            "settings/b.yaml": "y: 2\n",
            "settings.yaml": "a: {z: 3}\n",
        })
        assert load_variables(tmp_path) == {
            'settings': {'a': {'x': 1, 'z': 3}, 'b': {'y': 2}},
        }

    def test_later_file_wins_on_scalar_collision(self, tmp_path):
        write_tree(tmp_path, {
            "env/base.yaml": "mode: dev\n",
            "env.yaml": "base: {mode: prod}\n",
        })
        # "env.yaml" sorts before "env/base.yaml"
        assert load_variables(tmp_path) == {'env': {'base': {'mode': 'dev'}}}

    def test_top_level_merge_splices_into_directory_level(self, tmp_path):
        write_tree(tmp_path, {
            "shared.yaml": "!MergeMapping {owner: team, region: eu}\n",
            "project.yaml": "name: demo\n",
        })
        assert load_variables(tmp_path) == {
            'owner': 'team',
            'region': 'eu',
            'project': {'name': 'demo'},
        }

    def test_tags_are_evaluated(self, tmp_path):
        write_tree(tmp_path, {"tool.yaml": "list: [0, !MergeSequence [1, 2]]\nwho: !Shell echo me\n"})
        assert load_variables(tmp_path) == {'tool': {'list': [0, 1, 2], 'who': 'me\n'}}

    def test_python_variable_file(self, tmp_path):
        write_tree(tmp_path, {"computed.py": "items = [n * 2 for n in range(3)]\n{'items': items}\n"})
        assert load_variables(tmp_path) == {'computed': {'items': [0, 2, 4]}}

    def test_python_variable_file_uses_search_paths(self, tmp_path):
        lib = write_tree(tmp_path / "lib", {"naming_helpers.py": "def slug(text):\n    return text.lower()\n"})
        variables = write_tree(tmp_path / "variables", {
            "names.py": "import naming_helpers\nnaming_helpers.slug('MyApp')\n",
        })
        assert load_variables(variables, search_paths=[lib]) == {'names': 'myapp'}

    def test_python_variable_file_failure(self, tmp_path):
        write_tree(tmp_path, {"broken.py": "x = 1\nundefined_name\n"})
        with pytest.raises(ScriptError) as exc_info:
            load_variables(tmp_path)
        assert exc_info.value.source_error.line == 2

    def test_unknown_extensions_are_ignored(self, tmp_path):
        write_tree(tmp_path, {"notes.txt": "ignored", "a.yaml": "1\n"})
        assert load_variables(tmp_path) == {'a': 1}

    def test_invalid_yaml(self, tmp_path):
        write_tree(tmp_path, {"bad.yaml": "a: [1\n"})
        with pytest.raises(VariablesError):
            load_variables(tmp_path)

    def test_binary_file_is_rejected_by_name(self, tmp_path):
        (tmp_path / "blob.yaml").write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(VariablesError, match="blob.yaml"):
            load_variables(tmp_path)


class TestLoadOverrides:

    def test_yaml_file_is_loaded_as_is(self, tmp_path):
        write_tree(tmp_path, {"overrides.yaml": "project: {name: other}\n"})
        assert load_overrides(tmp_path / "overrides.yaml") == {'project': {'name': 'other'}}

    def test_directory_is_loaded_like_variables(self, tmp_path):
        write_tree(tmp_path, {"project.yaml": "name: other\n"})
        assert load_overrides(tmp_path) == {'project': {'name': 'other'}}

    def test_unsupported_file(self, tmp_path):
        write_tree(tmp_path, {"overrides.json": "{}"})
        with pytest.raises(VariablesError, match="Unsupported"):
            load_overrides(tmp_path / "overrides.json")
