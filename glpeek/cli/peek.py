from rich.console import Console

from glpeek.archive import destination_folder, extract_archive, spawn_archive_fetch
from glpeek.cli.common import VerboseFlag, configure_logging, remove_stacktrace
from glpeek.config import load_config, resolve_credentials
from glpeek.editor import editor_command, launch_editor
from glpeek.gitlab import GitLabClient, resolve_target
from glpeek.url import parse


def peek(url: str, *, wait: bool = False, print_only: bool = False, verbose: VerboseFlag = False) -> int:
    """Take a quick look at a repository from GitLab.

    Supported URLs:

    - ``https://gitlab.com/org/repo``
    - ``https://gitlab.com/org/repo/-/tree/<branch>``
    - ``https://gitlab.com/org/repo/-/merge_requests/<id>``
    - ``https://gitlab.com/org/repo/-/commit/<sha>``

    Self-hosted GitLab instances work the same way.

    Add a ``~/.gl-peek`` file with your GitLab tokens to access private repositories:

    ```
    # For gitlab.com
    GITLAB_TOKEN="..."

    # For gitlab.fqdn.com
    GITLAB_TOKEN_GITLAB_FQDN_COM="..."

    # Define your editor of choice
    EDITOR="subl"
    ```

    Parameters
    ----------
    url: str
        GitLab repository, branch, merge request, or commit URL.
    wait: bool
        Finish downloading before opening the editor.
    print_only: bool
        Print the destination folder instead of opening the editor.

    Returns
    -------
    int
        Editor's exit code.
    """
    configure_logging(verbose)
    console = Console(stderr=True)

    with remove_stacktrace():
        parsed, ref = parse(url)

        config = load_config()
        command = None if print_only else editor_command(config.editor)
        credentials = resolve_credentials(parsed.host, config)
        client = GitLabClient(credentials, port=parsed.port)

        target = resolve_target(client, ref)
        dst = destination_folder(ref.repository, target.ref_label, target.commit_sha)

        if wait:
            with console.status(f"Downloading {ref.project_path}@{target.ref_label}"):
                extract_archive(client, ref.organization, ref.repository, target.commit_sha, dst)
        else:
            spawn_archive_fetch(credentials, ref.organization, ref.repository, target.commit_sha, dst, port=parsed.port)

        if command is None:
            print(dst)
            return 0

        console.print(f"Opening [bold]{ref.project_path}@{target.ref_label}[/bold] ({target.commit_sha}) in {dst}")
        return launch_editor(command, dst)
