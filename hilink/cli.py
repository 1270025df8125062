#!/usr/bin/env python3
"""
HiLink command-line client

Every command is listed in the COMMANDS table with its handler and its
parameters; the argparse frontend is built from that table.

Usage:
    hilink list
    hilink device-info
    hilink --username admin sms-send --msg "hello" --to +15551234567
    hilink -v --endpoint http://192.168.8.1/ signal-info

Environment Variables:
    HILINK_URL        Default for --endpoint
    HILINK_USERNAME   Default for --username
    HILINK_PASSWORD   Default for --password
"""

import os
import sys
import json
import getpass
import logging
import argparse
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import requests

from .exceptions import HilinkError
from .hilink_api import DEFAULT_TIMEOUT, DEFAULT_URL, HilinkAPI
from .models import SmsBoxType


@dataclass(frozen=True)
class Param:
    """A command option, exposed as --<name>"""

    name: str
    help: str = ""
    type: Callable[[str], Any] = str
    required: bool = False
    default: Any = None
    nargs: Optional[str] = None
    flag: bool = False
    choices: Optional[Tuple[Any, ...]] = None


@dataclass(frozen=True)
class Command:
    handler: Callable[[HilinkAPI, argparse.Namespace], Any]
    help: str
    params: Tuple[Param, ...] = ()


def _no_args(method: Callable[[HilinkAPI], Any]) -> Callable[[HilinkAPI, argparse.Namespace], Any]:
    return lambda api, args: method(api)


PIN = Param("pin", "SIM PIN", required=True)
NEW_PIN = Param("new", "new SIM PIN", required=True)
INDEX = Param("index", "message index", required=True)

COMMANDS: Dict[str, Command] = {
    "global-config": Command(_no_args(HilinkAPI.global_config), "Retrieve the global HiLink configuration"),
    "network-types": Command(_no_args(HilinkAPI.network_types), "Retrieve the available network types"),
    "pc-assistant-config": Command(_no_args(HilinkAPI.pc_assistant_config), "Retrieve the PC Assistant configuration"),
    "device-config": Command(_no_args(HilinkAPI.device_config), "Retrieve device configuration"),
    "webui-config": Command(_no_args(HilinkAPI.webui_config), "Retrieve the WebUI configuration"),
    "sms-config": Command(_no_args(HilinkAPI.sms_config), "Retrieve device SMS configuration"),
    "wlan-basic-settings": Command(_no_args(HilinkAPI.wlan_basic_settings), "Retrieve the basic WLAN settings"),
    "cradle-status-info": Command(_no_args(HilinkAPI.cradle_status_info), "Retrieve cradle status information"),
    "autorun-version": Command(_no_args(HilinkAPI.autorun_version), "Retrieve autorun version"),
    "device-basic-info": Command(_no_args(HilinkAPI.device_basic_info), "Retrieve basic device information"),
    "public-key": Command(_no_args(HilinkAPI.public_key), "Retrieve the WebUI public key"),
    "reboot": Command(_no_args(HilinkAPI.reboot), "Restart the device"),
    "device-features": Command(_no_args(HilinkAPI.device_features), "Retrieve device feature information"),
    "device-info": Command(_no_args(HilinkAPI.device_info), "Retrieve device information"),
    "signal-info": Command(_no_args(HilinkAPI.signal_info), "Retrieve signal information"),
    "global-features": Command(_no_args(HilinkAPI.global_features), "Retrieve global feature information"),
    "language": Command(_no_args(HilinkAPI.language), "Retrieve the current language"),
    "notification-info": Command(_no_args(HilinkAPI.notification_info), "Retrieve notification information"),
    "sim-info": Command(_no_args(HilinkAPI.sim_info), "Retrieve SIM card information"),
    "status-info": Command(_no_args(HilinkAPI.status_info), "Retrieve connection status information"),
    "traffic-statistics": Command(_no_args(HilinkAPI.traffic_statistics), "Retrieve traffic statistics"),
    "network-info": Command(_no_args(HilinkAPI.network_info), "Retrieve network provider information"),
    "wifi-features": Command(_no_args(HilinkAPI.wifi_features), "Retrieve wifi feature information"),
    "mode-info": Command(_no_args(HilinkAPI.mode_info), "Retrieve network mode information"),
    "connection-info": Command(_no_args(HilinkAPI.connection_info), "Retrieve connection (dialup) information"),
    "profile-info": Command(_no_args(HilinkAPI.profile_info), "Retrieve profile information (ie, APN)"),
    "connect": Command(_no_args(HilinkAPI.connect), "Connect to the network provider"),
    "disconnect": Command(_no_args(HilinkAPI.disconnect), "Disconnect from the network provider"),
    "pin-info": Command(_no_args(HilinkAPI.pin_info), "Retrieve SIM PIN status information"),
    "pin-enter": Command(lambda api, a: api.pin_enter(a.pin), "Enter the SIM PIN", (PIN,)),
    "pin-activate": Command(lambda api, a: api.pin_activate(a.pin), "Activate the SIM PIN", (PIN,)),
    "pin-deactivate": Command(lambda api, a: api.pin_deactivate(a.pin), "Deactivate the SIM PIN", (PIN,)),
    "pin-change": Command(lambda api, a: api.pin_change(a.pin, a.new), "Change the SIM PIN", (PIN, NEW_PIN)),
    "pin-enter-puk": Command(
        lambda api, a: api.pin_enter_puk(a.puk, a.new),
        "Unblock the SIM with its PUK",
        (Param("puk", "PUK code", required=True), NEW_PIN),
    ),
    "sms-list": Command(
        lambda api, a: api.sms_list(SmsBoxType(a.box), a.page, a.count, a.ascending, a.unread_preferred),
        "Retrieve a page of SMS",
        (
            Param("box", "1=inbox, 2=outbox, 3=draft", type=int, default=int(SmsBoxType.INBOX),
                  choices=tuple(int(box) for box in SmsBoxType)),
            Param("page", "page index", type=int, default=1),
            Param("count", "messages per page", type=int, default=20),
            Param("ascending", "oldest first", flag=True),
            Param("unread-preferred", "unread messages first", flag=True),
        ),
    ),
    "sms-count": Command(_no_args(HilinkAPI.sms_count), "Retrieve the count of SMS per folder"),
    "sms-send": Command(
        lambda api, a: api.sms_send(a.msg, *a.to),
        "Send an SMS",
        (Param("msg", "message text", required=True), Param("to", "recipient numbers", required=True, nargs="+")),
    ),
    "sms-send-status": Command(_no_args(HilinkAPI.sms_send_status), "Retrieve the SMS send status"),
    "sms-set-read": Command(lambda api, a: api.sms_set_read(a.index), "Mark an SMS as read", (INDEX,)),
    "sms-delete": Command(lambda api, a: api.sms_delete(a.index), "Delete an SMS", (INDEX,)),
    "ussd-status": Command(lambda api, a: api.ussd_status().name, "Retrieve the USSD session state"),
    "ussd-code": Command(lambda api, a: api.ussd_code(a.code), "Send a USSD code",
                         (Param("code", "USSD code, e.g. *100#", required=True),)),
    "ussd-content": Command(_no_args(HilinkAPI.ussd_content), "Retrieve the USSD session content"),
    "ussd-release": Command(_no_args(HilinkAPI.ussd_release), "Release the USSD session"),
    "all-info": Command(_no_args(HilinkAPI.get_all_info), "Query the main read endpoints"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hilink", description="Huawei HiLink WebUI client")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose logging")
    parser.add_argument("--endpoint", default=os.getenv("HILINK_URL", DEFAULT_URL), help="api endpoint")
    parser.add_argument("--username", default=os.getenv("HILINK_USERNAME"), help="login username")
    parser.add_argument("--password", default=os.getenv("HILINK_PASSWORD"), help="login password")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="request timeout in seconds")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.add_parser("list", help="list available commands")

    for name, command in COMMANDS.items():
        sub = subparsers.add_parser(name, help=command.help)
        for param in command.params:
            option = f"--{param.name}"
            if param.flag:
                sub.add_argument(option, action="store_true", help=param.help)
            else:
                sub.add_argument(option, type=param.type, required=param.required,
                                 default=param.default, nargs=param.nargs, choices=param.choices,
                                 help=param.help)
    return parser


def format_commands() -> str:
    width = max(len(name) for name in COMMANDS)
    lines = ["The following are the list of available commands:", ""]
    for name, command in COMMANDS.items():
        lines.append(f"  {name.ljust(width)}  {command.help}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command in (None, "list"):
        print(format_commands())
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    password = args.password
    if args.username and password is None:
        password = getpass.getpass("Password: ")

    api = HilinkAPI(url=args.endpoint, username=args.username, password=password,
                    timeout=args.timeout, log_http=args.verbose)
    try:
        result = COMMANDS[args.command].handler(api, args)
    except (HilinkError, requests.RequestException) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        api.close()

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
