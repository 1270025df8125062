"""Tests for the command-line client."""

import json

import pytest

from hilink.cli import COMMANDS, build_parser, main

from conftest import OK

DEVICE_INFO = "<response><DeviceName>E3372h-320</DeviceName></response>"


def test_list_commands(capsys):
    assert main(["list"]) == 0

    out = capsys.readouterr().out
    assert "available commands" in out
    for name in COMMANDS:
        assert name in out


def test_no_command_lists_commands(capsys):
    assert main([]) == 0
    assert "device-info" in capsys.readouterr().out


@pytest.mark.parametrize("name", sorted(COMMANDS))
def test_every_command_has_a_parser(name):
    argv = [name]
    for param in COMMANDS[name].params:
        if param.required:
            argv += [f"--{param.name}", "1"]

    args = build_parser().parse_args(argv)

    assert args.command == name


def test_device_info_prints_json(patched_sessions, capsys):
    patched_sessions.route("api/device/information", DEVICE_INFO)

    assert main(["--endpoint", "http://192.168.8.1", "device-info"]) == 0

    assert json.loads(capsys.readouterr().out) == {"DeviceName": "E3372h-320"}
    assert patched_sessions.paths == ["api/webserver/SesTokInfo", "api/device/information"]


def test_sms_send(patched_sessions, capsys):
    patched_sessions.route("api/sms/send-sms", OK)

    assert main(["sms-send", "--msg", "hello", "--to", "+100", "+200"]) == 0

    assert capsys.readouterr().out.strip() == "true"
    assert b"<Phone>+200</Phone>" in patched_sessions.calls[-1].data


def test_sms_send_too_long(patched_sessions, capsys):
    assert main(["sms-send", "--msg", "x" * 200, "--to", "+100"]) == 1

    assert capsys.readouterr().err.startswith("error:")
    assert patched_sessions.calls == []


def test_device_error_exits_with_failure(patched_sessions, capsys):
    assert main(["signal-info"]) == 1

    assert "100002" in capsys.readouterr().err


def test_password_prompted_when_missing(patched_sessions, monkeypatch, capsys):
    patched_sessions.route("api/user/login", OK,
                           headers={"__RequestVerificationTokenone": "login-tok"},
                           cookies={"SessionID": "login-session"})
    patched_sessions.route("api/ussd/status", "<response><result>0</result></response>")
    prompts = []
    monkeypatch.setattr("getpass.getpass", lambda prompt: prompts.append(prompt) or "secret")

    assert main(["--username", "admin", "ussd-status"]) == 0

    assert prompts == ["Password: "]
    assert json.loads(capsys.readouterr().out) == "NONE"
    assert "api/user/login" in patched_sessions.paths


def test_sms_list_rejects_unknown_box(patched_sessions, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["sms-list", "--box", "7"])

    assert exc_info.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
    assert patched_sessions.calls == []


def test_sms_list_box(patched_sessions, capsys):
    patched_sessions.route("api/sms/sms-list", "<response><Count>0</Count><Messages></Messages></response>")

    assert main(["sms-list", "--box", "2"]) == 0

    assert b"<BoxType>2</BoxType>" in patched_sessions.calls[-1].data
