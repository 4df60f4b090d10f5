import logging
from pathlib import Path

import pytest

from stache import Stache
from stache.resolver import MappingResolver

from tests.infrastructure.file_utils import write


@pytest.fixture
def templates() -> MappingResolver:
    """In-memory templates, consulted before the filesystem resolver."""
    return MappingResolver()


@pytest.fixture
def manager(templates: MappingResolver) -> Stache:
    m = Stache()
    m.resolver.attach(templates, 10)
    return m


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Directory with a couple of .mustache files."""
    root = tmp_path / "templates"
    write(root / "hello.mustache", "Hello, {{name}}!")
    write(root / "mail" / "footer.mustache", "-- {{sender}}")
    write(root / "page.mustache", "<h1>{{$title}}Default{{/title}}</h1>{{$body}}{{/body}}")
    return root


@pytest.fixture(autouse=True)
def _reset_package_logger():
    # CLI runs attach a stderr handler bound to the capture stream of that test
    log = logging.getLogger("stache")
    yield
    for h in list(log.handlers):
        log.removeHandler(h)
    log.setLevel(logging.NOTSET)
