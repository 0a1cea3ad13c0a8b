"""Tests for log filtering and the debug timing decorator."""

from unittest.mock import patch

from appbundle.debug import debug, log


@patch("appbundle.debug.log_level", return_value="info")
def test_log_filters_below_level(mock_level, capsys):
    log("hidden", "debug")
    log("shown", "info")
    log("also shown", "error")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[INFO]" in out and "shown" in out
    assert "[ERROR]" in out


@patch("appbundle.debug.log_level", return_value="error")
def test_log_error_level_hides_info(mock_level, capsys):
    log("quiet", "info")
    assert capsys.readouterr().out == ""


@patch("appbundle.debug.log_level", return_value="bogus")
def test_log_unknown_level_behaves_like_info(mock_level, capsys):
    log("hidden", "debug")
    log("shown", "warn")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[WARN]" in out


@patch("appbundle.debug.verbose", return_value=False)
def test_debug_decorator_passthrough(mock_verbose, capsys):
    @debug("double")
    def double(x):
        return x * 2

    assert double(4) == 8
    assert capsys.readouterr().out == ""


@patch("appbundle.debug.log_level", return_value="debug")
@patch("appbundle.debug.verbose", return_value=True)
def test_debug_decorator_logs_timing(mock_verbose, mock_level, capsys):
    @debug("double")
    def double(x):
        return x * 2

    assert double(4) == 8
    out = capsys.readouterr().out
    assert "[DEBUG]" in out
    assert "double" in out
    assert "8" in out


@patch("appbundle.debug.log_level", return_value="debug")
@patch("appbundle.debug.verbose", return_value=True)
def test_debug_context_manager(mock_verbose, mock_level, capsys):
    with debug("block") as timer:
        timer.result = "done"
    assert "block" in capsys.readouterr().out
