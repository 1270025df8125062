#!/usr/bin/env python3
"""
HiLink Saved Credentials

Logs in once and saves url, username and password digest to ~/.hilink,
so the other examples can connect without asking again.
"""

import sys
import getpass
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from hilink import CredentialStore, HilinkAPI, HilinkError
from hilink.hilink_api import DEFAULT_URL


def main():
    parser = argparse.ArgumentParser(description="Manage saved HiLink credentials")
    parser.add_argument("--url", default=DEFAULT_URL, help="WebUI URL")
    parser.add_argument("--username", default="admin", help="login username")
    parser.add_argument("--show", action="store_true", help="show saved credentials")
    parser.add_argument("--delete", action="store_true", help="delete saved credentials")
    args = parser.parse_args()

    store = CredentialStore()

    print("="*70)
    print("🔐 HILINK SAVED CREDENTIALS")
    print("="*70)

    if args.delete:
        if store.delete():
            print(f"\n🗑️  Deleted {store.credentials_file}")
        else:
            print("\n⚠️  No saved credentials")
        return 0

    if args.show:
        url, credentials = store.load()
        if credentials is None:
            print("\n⚠️  No saved credentials")
            return 1
        print(f"\n   URL:      {url}")
        print(f"   Username: {credentials.username}")
        print("   Password: (digest only)")
        return 0

    try:
        password = getpass.getpass(f"Password for {args.username}: ")
    except KeyboardInterrupt:
        print("\n\n❌ Cancelled by user")
        return 1

    try:
        api = HilinkAPI.login(args.url, args.username, password, save_credentials=True)
    except HilinkError as e:
        print(f"\n❌ Login failed: {e}")
        return 1

    api.close()
    print(f"\n✅ Logged in, credentials saved to {store.credentials_file}")
    print("="*70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
