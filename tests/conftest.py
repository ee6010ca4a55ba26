"""Shared test fixtures for scrollsmith tests."""
from pathlib import Path
from typing import Dict

import pytest
import yaml

from scrollsmith.core.config import set_config
from scrollsmith.core.package_loader import PackageLoader


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create files under ``root`` from a mapping of relative path to content."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def write_descriptor(root: Path, data: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    descriptor = root / "scrollsmith.yaml"
    descriptor.write_text(yaml.safe_dump(data, sort_keys=False))
    return descriptor


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from default settings."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def package_root(tmp_path):
    """A package with a local scroll, an action and one installed repository."""
    root = tmp_path / "project"
    write_descriptor(root, {
        'name': 'project',
        'scrolls': [
            {'name': 'readme', 'path': 'scrolls/readme', 'about': 'Project README'},
        ],
        'actions': [
            {
                'name': 'hello',
                'path': 'actions/hello.py',
                'args': [
                    {'name': 'user-name', 'required': True},
                    {'name': 'loud', 'kind': 'flag'},
                ],
            },
        ],
        'repositories': [
            {'name': 'central', 'uri': 'https://example.com/central.git'},
        ],
        'targets': [
            {'name': '@', 'path': '.'},
            {'name': 'docs', 'path': 'docs'},
        ],
    })
    write_tree(root, {
        'scrolls/readme/templates/README.md.jinja': "# {{ project.name }}\n\n{{ project.description }}\n",
        'scrolls/readme/templates/LICENSE': "MIT\n",
        'scrolls/readme/variables/project.yaml': "name: Demo\ndescription: A demo project\n",
        'actions/hello.py': (
            "greeting = f'Hello {args[\"user_name\"]}'\n"
            "greeting.upper() if args['loud'] else greeting\n"
        ),
    })

    module = root / "scroll_modules" / "central"
    write_descriptor(module, {
        'name': 'central',
        'scrolls': [{'name': 'service', 'path': 'scrolls/service'}],
    })
    write_tree(module, {
        'scrolls/service/templates/{service_name}.txt.pyt': "template.println(f'service {service_name}')\n",
        'scrolls/service/variables/service_name.yaml': "api\n",
        'lib/naming.py': "def shout(text):\n    return text.upper() + '!'\n",
    })
    return root


@pytest.fixture
def package_context(package_root):
    return PackageLoader().load_context(package_root)
