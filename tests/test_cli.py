import threading

from typer.testing import CliRunner

from virtual_notify import VirtualNotify
from virtual_notify.cli import app

runner = CliRunner()


def test_pub_without_subscriber(shared_dir) -> None:
    result = runner.invoke(app, ["pub", "test", "e1", "--dir", str(shared_dir)])
    assert result.exit_code == 0


def test_pub_timeout_fails(shared_dir) -> None:
    result = runner.invoke(app, ["pub", "test", "e1", "--timeout", "0.1", "--dir", str(shared_dir)])
    assert result.exit_code == 1


def test_wait_timeout_exit_code(shared_dir) -> None:
    result = runner.invoke(app, ["wait", "test", "e1", "--timeout", "0.2", "--interval", "0.02", "--dir", str(shared_dir)])
    assert result.exit_code == 2


def test_sub_prints_events(shared_dir) -> None:
    pub = VirtualNotify("test", base_dir=shared_dir)
    t = threading.Thread(target=pub.publish, args=("e1",), kwargs={"timeout": 10.0})
    t.start()
    try:
        result = runner.invoke(
            app,
            ["sub", "test", "e1", "--interval", "0.02", "--count", "1", "--dir", str(shared_dir)],
        )
    finally:
        t.join(10.0)
        pub.close()
    assert result.exit_code == 0, result.output
    assert "e1" in result.output.splitlines()


def test_dir_option_defaults_to_settings(shared_dir, monkeypatch) -> None:
    monkeypatch.setenv("VIRTUAL_NOTIFY_DIR", str(shared_dir))
    result = runner.invoke(app, ["pub", "test", "e1"])
    assert result.exit_code == 0
    assert list(shared_dir.glob("vn_*.lock"))
