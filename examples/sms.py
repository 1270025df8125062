#!/usr/bin/env python3
"""
Send or List SMS through a HiLink Device

Usage:
    python sms.py --to +15551234567 --msg "hello"
    python sms.py --list [--count 50]
"""

import sys
import json
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
from hilink import HilinkAPI, HilinkError, SmsBoxType


def main():
    parser = argparse.ArgumentParser(description="Send or list SMS")
    parser.add_argument("--to", nargs="+", help="recipient numbers")
    parser.add_argument("--msg", help="message text (< 160 characters)")
    parser.add_argument("--list", action="store_true", help="list sms messages in inbox")
    parser.add_argument("-c", "--count", type=int, default=50, help="message count for --list")
    args = parser.parse_args()

    api = HilinkAPI.from_env()

    try:
        if args.list:
            messages = api.sms_list(SmsBoxType.INBOX, 1, args.count, False, True)
            print(json.dumps(messages, indent=2))
            return 0

        if not args.msg:
            print("error: must specify --msg", file=sys.stderr)
            return 1
        if not args.to:
            print("error: must specify --to", file=sys.stderr)
            return 1

        if not api.sms_send(args.msg, *args.to):
            print("could not send message", file=sys.stderr)
            return 1
    except HilinkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print("message sent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
