import signal
import threading
from pathlib import Path

from parspack_agent import main as agent_main
from parspack_ranges import MODULE_ID, LifecycleState, ParspackIPRange, SourceRegistry
from parspack_ranges.fetcher import StatusError


def write_config(tmp_path: Path, body: str) -> Path:
    config_path = tmp_path / "agent.yaml"
    config_path.write_text(body)
    return config_path


def recording_registry(created, fetch=None):
    def build():
        registry = SourceRegistry()

        def factory(config):
            if fetch is None:
                source = ParspackIPRange(config)
            else:
                source = ParspackIPRange(config, fetch=fetch)
            created.append(source)
            return source

        registry.register(MODULE_ID, factory)
        return registry

    return build


def test_once_prints_prefixes(tmp_path: Path, monkeypatch, capsys):
    calls = []

    def fake_fetch(url, timeout):
        calls.append((url, timeout))
        return "# header\n1.2.3.0/24\nbad\n5.6.7.0/16\n"

    created = []
    monkeypatch.setattr(agent_main, "default_registry", recording_registry(created, fake_fetch))
    config_path = write_config(
        tmp_path, "sources:\n  - url: http://cdn.test/ips.txt\n    timeout: 5s\n"
    )

    status = agent_main.main(["--config", str(config_path), "--once"])

    assert status == 0
    assert calls == [("http://cdn.test/ips.txt", 5.0)]
    assert capsys.readouterr().out.splitlines() == ["1.2.3.0/24", "5.6.7.0/16"]
    assert created[0].state is LifecycleState.UNINITIALIZED


def test_once_reports_fetch_failure(tmp_path: Path, monkeypatch):
    def failing_fetch(url, timeout):
        raise StatusError(503, url)

    monkeypatch.setattr(agent_main, "default_registry", recording_registry([], failing_fetch))
    config_path = write_config(tmp_path, "sources:\n  - url: http://cdn.test/ips.txt\n")

    assert agent_main.main(["--config", str(config_path), "--once"]) == 1


def test_unknown_module_is_rejected(tmp_path: Path):
    config_path = write_config(tmp_path, "sources:\n  - module: http.ip_sources.nope\n")

    assert agent_main.main(["--config", str(config_path), "--once"]) == 2
    assert agent_main.main(["--config", str(config_path)]) == 2


def test_missing_config_file(tmp_path: Path):
    assert agent_main.main(["--config", str(tmp_path / "missing.yaml"), "--once"]) == 2


def test_runs_sources_until_signalled(tmp_path: Path, monkeypatch, cidr_server, wait_for):
    cidr_server.body = "185.215.232.0/22\n"
    config_path = write_config(
        tmp_path,
        f"sources:\n  - url: {cidr_server.url}\n    interval: 1h\n    timeout: 5s\n",
    )
    created = []
    handlers = {}
    monkeypatch.setattr(agent_main, "default_registry", recording_registry(created))
    monkeypatch.setattr(
        agent_main.signal, "signal", lambda signum, handler: handlers.__setitem__(signum, handler)
    )

    def terminate_after_first_fetch():
        wait_for(lambda: signal.SIGTERM in handlers and cidr_server.hits >= 1)
        handlers[signal.SIGTERM](signal.SIGTERM, None)

    trigger = threading.Thread(target=terminate_after_first_fetch, daemon=True)
    trigger.start()

    status = agent_main.main(["--config", str(config_path)])
    trigger.join(timeout=2.0)

    assert status == 0
    assert len(created) == 1
    source = created[0]
    assert source.state is LifecycleState.STOPPED
    assert source.join(timeout=2.0)
    assert [str(p) for p in source.get_ip_ranges()] == ["185.215.232.0/22"]
