from lezhin_dl.utils.logger import Logger, file_listener


def test_debug_is_hidden_until_enabled(capsys):
    log = Logger()
    log.debug("hidden")
    log.set_debug(True)
    log.debug("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[DEBUG] shown" in out


def test_errors_go_to_stderr(capsys):
    Logger().error("broken")
    captured = capsys.readouterr()
    assert "[ERROR] broken" in captured.err
    assert captured.out == ""


def test_failing_listener_is_ignored(capsys):
    log = Logger()
    received = []

    def broken(level, message):
        raise RuntimeError("listener")

    log.add_listener(broken)
    log.add_listener(lambda level, message: received.append(level))
    log.warning("still delivered")
    assert received == ["WARNING"]


def test_file_listener(tmp_path):
    path = tmp_path / "log.txt"
    log = Logger()
    log.add_listener(file_listener(str(path)))
    log.info("first")
    log.info("second")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].endswith("[INFO] second")
