from campus_bins import app as app_module


def test_main_starts_the_server(app, monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(app_module, "create_app", lambda: app)
    monkeypatch.setattr(app, "run", lambda **kwargs: calls.append(kwargs))

    app_module.main()

    assert calls == [{"host": "0.0.0.0", "port": 5000}]
    out = capsys.readouterr().out
    assert "Campus Bins Server" in out
    assert "POST /api/waste" in out
