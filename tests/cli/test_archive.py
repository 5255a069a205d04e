from glpeek.archive import TOKEN_ENV_VAR
from glpeek.cli.main import app
from tests.conftest import make_archive, make_archive_response, make_response, run_cli


def _archive_args(dst):
    return [
        "archive",
        str(dst),
        "--host",
        "gitlab.fqdn.com",
        "--organization",
        "acme",
        "--repository",
        "widgets",
        "--sha",
        "deadbeef",
    ]


def test_archive(mocker, mock_requests_get, monkeypatch, tmp_path):
    monkeypatch.setenv(TOKEN_ENV_VAR, "glpat-from-parent")
    mock_requests_get.return_value = make_archive_response(mocker, make_archive({"main.py": b"print(1)\n"}))
    dst = tmp_path / "widgets-main-deadbeef"

    exit_code = run_cli(app, _archive_args(dst))

    assert exit_code == 0
    assert (dst / "main.py").read_bytes() == b"print(1)\n"
    args, kwargs = mock_requests_get.call_args
    assert args[0] == "https://gitlab.fqdn.com/api/v4/projects/acme%2Fwidgets/repository/archive.tar.gz"
    assert kwargs["headers"] == {"Authorization": "Bearer glpat-from-parent"}


def test_archive_token_from_config(mocker, mock_requests_get, config_file, tmp_path):
    config_file('GITLAB_TOKEN_GITLAB_FQDN_COM="glpat-fqdn"\n')
    mock_requests_get.return_value = make_archive_response(mocker, make_archive({"main.py": b""}))

    exit_code = run_cli(app, _archive_args(tmp_path / "dst"))

    assert exit_code == 0
    assert mock_requests_get.call_args.kwargs["headers"] == {"Authorization": "Bearer glpat-fqdn"}


def test_archive_error(mocker, mock_requests_get, tmp_path, capsys):
    mock_requests_get.return_value = make_response(mocker, status_code=404)

    exit_code = run_cli(app, _archive_args(tmp_path / "dst"))

    assert exit_code == 1
    assert "Failed to download archive of acme/widgets@deadbeef" in capsys.readouterr().out
