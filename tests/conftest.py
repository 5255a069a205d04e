import io
import os
import tarfile

import pytest
import requests

import glpeek.config


def run_cli(app, args):
    """Run a CLI app with support for both Cyclopts v3 and v4.

    Cyclopts v3 returns None on success.
    Cyclopts v4 raises SystemExit with code 0 on success.

    Parameters
    ----------
    app : callable
        The CLI app to run.
    args : list
        Command line arguments.

    Returns
    -------
    int
        Exit code (0 for success).
    """
    try:
        result = app(args)
        # v3 behavior: returns None or int
        return result if isinstance(result, int) else 0
    except SystemExit as e:
        # v4 behavior: raises SystemExit
        return e.code if e.code is not None else 0


def make_response(mocker, payload=None, status_code=200):
    """Mock ``requests.Response`` with a JSON ``payload``."""
    response = mocker.MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Client Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


class RawStream(io.BytesIO):
    """Stand-in for ``urllib3.HTTPResponse`` as exposed by ``Response.raw``."""

    decode_content = False


def make_archive(files, root="widgets-deadbeef-deadbeef"):
    """In-memory ``tar.gz`` laid out like a GitLab repository archive."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        info = tarfile.TarInfo(root)
        info.type = tarfile.DIRTYPE
        info.mode = 0o755
        tar.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(f"{root}/{name}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_archive_response(mocker, data):
    response = make_response(mocker)
    response.raw = RawStream(data)
    return response


@pytest.fixture(autouse=True)
def cache_clear():
    glpeek.config.find_config_file.cache_clear()
    glpeek.config.load_config.cache_clear()
    yield
    glpeek.config.find_config_file.cache_clear()
    glpeek.config.load_config.cache_clear()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point configuration at a (missing) file in ``tmp_path`` and clear relevant variables."""
    for name in list(os.environ):
        if name.startswith("GITLAB_TOKEN") or name in ("EDITOR", "TRACE", "GL_PEEK_TOKEN"):
            monkeypatch.delenv(name)
    config_path = tmp_path / ".gl-peek"
    monkeypatch.setenv("GL_PEEK_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def config_file(isolated_environment):
    """Write the given text to the active configuration file."""

    def write(text):
        isolated_environment.write_text(text)
        return isolated_environment

    return write


@pytest.fixture
def mock_requests_get(mocker):
    """Fixture that mocks requests.get in the _retry module."""
    mock = mocker.patch("glpeek.gitlab._retry.requests.get")
    # Set default status_code to 200 for successful responses
    mock.return_value.status_code = 200
    return mock


def pytest_addoption(parser):
    parser.addoption(
        "--network",
        action="store_true",
        help="Include tests that interact with network (marked with marker @network)",
    )


def pytest_runtest_setup(item):
    if "network" in item.keywords and not item.config.getoption("--network"):
        pytest.skip("need --network option to run this test")
