import logging

import uvicorn

import config
import main

def test_setup_logging_uses_configured_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    config.setup_logging("debug")
    assert calls[0]["level"] == logging.DEBUG
    assert "%(name)s" in calls[0]["format"]

def test_run_server_passes_log_level_to_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    monkeypatch.setattr(config, "LOG_LEVEL", "WARNING")
    main.run_server(port=8123, reload=False)
    app, kw = calls[0]
    assert app == "api:app"
    assert kw["log_level"] == "warning"
    assert kw["port"] == 8123 and kw["reload"] is False
