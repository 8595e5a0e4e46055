import logging

import pytest

from dartlink.misc import get_cli_args


def test_defaults():
    args = get_cli_args([])

    assert args.host == "127.0.0.1"
    assert args.port == 3180
    assert args.interval == 1.0
    assert args.serve_tools is False
    assert args.log_level == logging.INFO


def test_options():
    args = get_cli_args(["-H", "192.168.1.20", "-p", "3181", "-i", "0.25", "--serve-tools", "-l", "DBG"])

    assert args.host == "192.168.1.20"
    assert args.port == 3181
    assert args.interval == 0.25
    assert args.serve_tools is True
    assert args.log_level == logging.DEBUG


@pytest.mark.parametrize("argv", [["-i", "0"], ["-i", "fast"], ["-p", "0"], ["-l", "LOUD"]])
def test_rejects_invalid(argv):
    with pytest.raises(SystemExit):
        get_cli_args(argv)
