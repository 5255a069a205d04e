from glpeek.config import find_config_file, load_config


def config():
    """Display configuration file location, editor, and which tokens are set."""
    cfg = load_config()
    path = find_config_file()

    print(f"Config file: {path}" + ("" if cfg.path else " (missing)"))
    print(f"Editor: {cfg.editor or '<not set>'}")

    names = cfg.token_variables()
    if not names:
        print("Tokens: <none>")
        return

    print("Tokens:")
    for name in names:
        status = "set" if cfg.get(name) else "empty"
        print(f"  {name}: {status}")
