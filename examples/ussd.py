#!/usr/bin/env python3
"""
Run a USSD Query through a HiLink Device

Sends a USSD code (e.g. a balance query), waits for the network to answer
and prints the reply.

Usage:
    python ussd.py --code "*100#"
    python ussd.py --check
"""

import sys
import time
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
from hilink import HilinkAPI, HilinkError, UssdState


def main():
    parser = argparse.ArgumentParser(description="Send a USSD code")
    parser.add_argument("--code", help="ussd code to send")
    parser.add_argument("--check", action="store_true", help="check ussd status")
    parser.add_argument("-t", "--sleep", type=float, default=1.0,
                        help="seconds between ussd api calls")
    parser.add_argument("--attempts", type=int, default=10,
                        help="status checks before giving up")
    args = parser.parse_args()

    api = HilinkAPI.from_env()

    try:
        if args.check:
            print(f"received: {api.ussd_status().name}")
            return 0

        if not args.code:
            print("error: no code provided", file=sys.stderr)
            return 1

        if not api.ussd_code(args.code):
            print("error: could not send ussd code", file=sys.stderr)
            return 1

        # wait for the network reply
        for _ in range(args.attempts):
            time.sleep(args.sleep)
            if api.ussd_status() != UssdState.WAITING:
                break

        print(api.ussd_content())
        api.ussd_release()
    except HilinkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
