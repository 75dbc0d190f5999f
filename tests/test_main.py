from fastapi import FastAPI

import monopoly.__main__ as cli


def test_main_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("PORT", "4000")

    cli.main([])

    app, kwargs = calls[0]
    assert isinstance(app, FastAPI)
    assert kwargs["port"] == 4000
    assert kwargs["lifespan"] == "on"


def test_flags_override_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("PORT", "4000")

    cli.main(["--port", "5000", "--host", "127.0.0.1", "--log-level", "warning"])

    assert calls[0]["port"] == 5000
    assert calls[0]["host"] == "127.0.0.1"
    assert calls[0]["log_level"] == "warning"


def _unset(monkeypatch, *names):
    # setenv first so monkeypatch restores the original state afterwards
    for name in names:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_env_file_supplies_settings(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    _unset(monkeypatch, "PORT", "DATABASE_URL")
    env_file = tmp_path / ".env"
    env_file.write_text("DATABASE_URL=sqlite:///:memory:\nPORT=4100\n")

    cli.main(["--env-file", str(env_file)])

    assert calls[0]["port"] == 4100


def test_env_file_in_working_directory(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    _unset(monkeypatch, "PORT", "DATABASE_URL")
    (tmp_path / ".env").write_text("DATABASE_URL=sqlite:///:memory:\nPORT=4200\n")
    monkeypatch.chdir(tmp_path)

    cli.main([])

    assert calls[0]["port"] == 4200


def test_environment_wins_over_env_file(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("PORT", "4000")
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=4100\n")

    cli.main(["--env-file", str(env_file)])

    assert calls[0]["port"] == 4000


def test_missing_env_file_is_ignored(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("PORT", "4000")

    cli.main(["--env-file", str(tmp_path / "absent.env")])

    assert calls[0]["port"] == 4000
