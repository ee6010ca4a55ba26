"""Tests for action argument handling and the action runner."""
import pytest

from conftest import write_descriptor, write_tree
from scrollsmith.core.actions import ActionRunner, build_args, parse_cli_args, to_snake_case
from scrollsmith.core.errors import ResolutionError, ScriptError, UsageError
from scrollsmith.core.package_loader import PackageLoader
from scrollsmith.models.package import ActionArg, ActionEntry


@pytest.fixture
def action():
    return ActionEntry(
        name='deploy',
        path='deploy.py',
        args=[
            ActionArg(name='target-path', required=True),
            ActionArg(name='label'),
            ActionArg(name='force', kind='flag'),
        ],
    )


class TestSnakeCase:

    @pytest.mark.parametrize("name,expected", [
        ('target-path', 'target_path'),
        ('targetPath', 'target_path'),
        ('TargetPath', 'target_path'),
        ('HTTPServer', 'http_server'),
        ('already_snake', 'already_snake'),
        ('user name', 'user_name'),
    ])
    def test_conversion(self, name, expected):
        assert to_snake_case(name) == expected


class TestBuildArgs:

    def test_values_keyed_by_snake_case(self, action):
        args = build_args(action, {'target-path': 'out', 'label': 'v1', 'force': True})
        assert args == {'target_path': 'out', 'label': 'v1', 'force': True}

    def test_absent_flag_is_false_and_absent_option_is_omitted(self, action):
        args = build_args(action, {'target-path': 'out'})
        assert args == {'target_path': 'out', 'force': False}

    def test_missing_required(self, action):
        with pytest.raises(UsageError, match="Option target-path is required"):
            build_args(action, {'label': 'v1'})

    def test_unknown_option(self, action):
        with pytest.raises(UsageError, match="Unknown option: nope"):
            build_args(action, {'target-path': 'out', 'nope': 'x'})


class TestParseCliArgs:

    def test_separate_and_inline_values(self, action):
        given = parse_cli_args(action, ['--target-path', 'out', '--label=v1', '--force'])
        assert given == {'target-path': 'out', 'label': 'v1', 'force': True}

    def test_empty(self, action):
        assert parse_cli_args(action, []) == {}

    def test_positional_rejected(self, action):
        with pytest.raises(UsageError, match="Unexpected argument: stray"):
            parse_cli_args(action, ['stray'])

    def test_option_without_value(self, action):
        with pytest.raises(UsageError, match="target-path requires a value"):
            parse_cli_args(action, ['--target-path', '--force'])

    def test_flag_with_value(self, action):
        with pytest.raises(UsageError, match="does not take a value"):
            parse_cli_args(action, ['--force=yes'])


class TestActionRunner:
    """Test running action scripts."""

    def test_run(self, package_context):
        assert ActionRunner(package_context).run('@/hello', {'user-name': 'Ada'}) == 'Hello Ada'

    def test_run_with_flag(self, package_context):
        result = ActionRunner(package_context).run('@/hello', {'user-name': 'Ada', 'loud': True})
        assert result == 'HELLO ADA'

    def test_missing_required_argument(self, package_context):
        with pytest.raises(UsageError, match="Option user-name is required"):
            ActionRunner(package_context).run('@/hello')

    def test_unknown_action(self, package_context):
        with pytest.raises(ResolutionError, match="No action with name: @/bye"):
            ActionRunner(package_context).run('@/bye')

    def test_action_drives_generation(self, package_root):
        write_descriptor(package_root, {
            'name': 'project',
            'scrolls': [{'name': 'readme', 'path': 'scrolls/readme'}],
            'actions': [{'name': 'docs', 'path': 'actions/docs.py'}],
            'repositories': [{'name': 'central', 'uri': 'https://example.com/central.git'}],
            'targets': [{'name': 'docs', 'path': 'docs'}],
        })
        write_tree(package_root, {
            'actions/docs.py': (
                "import naming\n"
                "written = engine.generate('@/readme', {'target_name': 'docs'}, {'project': {'name': 'Docs'}})\n"
                "{'written': written, 'title': naming.shout('docs')}\n"
            ),
        })
        context = PackageLoader().load_context(package_root)

        result = ActionRunner(context).run('@/docs')

        assert result == {'written': ['LICENSE', 'README.md'], 'title': 'DOCS!'}
        assert (package_root / "docs" / "README.md").read_text().startswith("# Docs\n")

    def test_script_failure_is_located(self, package_root, package_context):
        write_tree(package_root, {'actions/hello.py': "x = 1\nundefined_name\n"})
        with pytest.raises(ScriptError) as exc_info:
            ActionRunner(package_context).run('@/hello', {'user-name': 'Ada'})
        assert exc_info.value.source_error.line == 2
        assert exc_info.value.source_error.location.endswith('hello.py')
