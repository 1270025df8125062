#!/usr/bin/env python3
"""
HiLink Device Information Tool

Simple example showing how to get an overview of a HiLink device.
Session handling and login are done automatically by the API.
"""

import sys
import json
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
from hilink import HilinkAPI, HilinkError


def connect() -> HilinkAPI:
    """Saved credentials first, then environment variables"""
    try:
        api = HilinkAPI.from_saved_credentials()
        print("\n✅ Using saved credentials")
    except ValueError:
        api = HilinkAPI.from_env()
        print("\n✅ Using environment settings")
    api.start_session()
    return api


def main():
    # Handle command-line arguments
    if len(sys.argv) > 1 and sys.argv[1] in ['--help', '-h']:
        print("="*70)
        print("📡 HILINK API - DEVICE INFORMATION TOOL")
        print("="*70)
        print("\nUsage:")
        print("  python device_info.py              # Show device overview")
        print("  python device_info.py --json       # Dump raw data as JSON")
        print("\nEnvironment Variables:")
        print("  HILINK_URL       WebUI URL (default: http://192.168.8.1/)")
        print("  HILINK_USERNAME  Username (if the device requires login)")
        print("  HILINK_PASSWORD  Password")
        return 0

    print("="*70)
    print("📡 HILINK API - DEVICE INFORMATION TOOL")
    print("="*70)

    try:
        api = connect()
    except HilinkError as e:
        print(f"\n❌ Could not start a session: {e}")
        return 1

    if len(sys.argv) > 1 and sys.argv[1] == '--json':
        print(json.dumps(api.get_all_info(), indent=2))
        return 0

    print(f"   Device: {api.url}")
    print(f"   Logged in: {'yes' if api.logged_in else 'no'}")

    # 1. Device Information
    print("\n" + "─"*70)
    print("🖥️  DEVICE INFORMATION")
    print("─"*70)
    try:
        info = api.device_info()
        print(f"   Model: {info.get('DeviceName', 'N/A')}")
        print(f"   Serial Number: {info.get('SerialNumber', 'N/A')}")
        print(f"   IMEI: {info.get('Imei', 'N/A')}")
        print(f"   Firmware: {info.get('SoftwareVersion', 'N/A')}")
        print(f"   Hardware: {info.get('HardwareVersion', 'N/A')}")
        print(f"   WAN IP: {info.get('WanIPAddress', 'N/A')}")
    except HilinkError as e:
        print(f"   ❌ Failed to get device info: {e}")

    # 2. Network
    print("\n" + "─"*70)
    print("📡 NETWORK")
    print("─"*70)
    try:
        plmn = api.network_info()
        signal = api.signal_info()
        print(f"   Operator: {plmn.get('FullName', 'N/A')}")
        print(f"   Cell ID: {signal.get('cell_id', 'N/A')}")
        print(f"   RSRP: {signal.get('rsrp', 'N/A')}")
        print(f"   RSRQ: {signal.get('rsrq', 'N/A')}")
        print(f"   SINR: {signal.get('sinr', 'N/A')}")
    except HilinkError as e:
        print(f"   ⚠️  Network info not available: {e}")

    # 3. Traffic
    print("\n" + "─"*70)
    print("📊 TRAFFIC")
    print("─"*70)
    try:
        traffic = api.traffic_statistics()
        upload = int(traffic.get('TotalUpload', 0) or 0)
        download = int(traffic.get('TotalDownload', 0) or 0)
        print(f"   Uploaded: {upload / 1024 / 1024:.1f} MB")
        print(f"   Downloaded: {download / 1024 / 1024:.1f} MB")
    except (HilinkError, ValueError) as e:
        print(f"   ⚠️  Traffic statistics not available: {e}")

    print("\n" + "="*70)

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n[!] Interrupted by user")
        sys.exit(130)
