#!/usr/bin/env python3
"""
HiLink Monitoring Example - LTE Signal Quality Monitor

This script polls the device's LTE signal quality in real-time.
Displays RSRP, RSRQ and SINR metrics with quality assessments.
Press Ctrl+C to stop monitoring.
"""

import re
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
from hilink import HilinkAPI, HilinkError

POLL_INTERVAL_S = 5


def parse_metric(value):
    """Turn a device value like '-97dBm' or '>=-44dBm' into a float"""
    if not value:
        return None
    match = re.search(r"-?\d+(\.\d+)?", value)
    return float(match.group()) if match else None


# Signal Quality Evaluation Functions
def evaluate_rsrp(rsrp):
    """
    Evaluate RSRP (Reference Signal Received Power)
    Range: -80 (excellent) to -110 (no signal) dBm
    """
    if rsrp >= -80:
        return "Excellent", "🟢"
    elif rsrp >= -90:
        return "Good", "🟢"
    elif rsrp >= -100:
        return "Fair", "🟡"
    else:
        return "Poor", "🔴"


def evaluate_rsrq(rsrq):
    """
    Evaluate RSRQ (Reference Signal Received Quality)
    Range: -10 (excellent) to -20 (poor) dB
    """
    if rsrq >= -10:
        return "Excellent", "🟢"
    elif rsrq >= -15:
        return "Good", "🟢"
    elif rsrq >= -20:
        return "Fair", "🟡"
    else:
        return "Poor", "🔴"


def evaluate_sinr(sinr):
    """
    Evaluate SINR (Signal to Interference plus Noise Ratio)
    Range: 20 (excellent) to 0 (poor) dB
    """
    if sinr >= 20:
        return "Excellent", "🟢"
    elif sinr >= 13:
        return "Good", "🟢"
    elif sinr >= 0:
        return "Fair", "🟡"
    else:
        return "Poor", "🔴"


def draw_bar(value, min_val, max_val, width=50):
    """Draw a quality bar with filled indicator"""
    if value <= min_val:
        position = 0
    elif value >= max_val:
        position = width
    else:
        position = int((value - min_val) / (max_val - min_val) * width)
    return "   " + "❚" * position + "─" * (width - position)


METRICS = [
    # key, label, unit, evaluator, bar range
    ("rsrp", "RSRP", "dBm", evaluate_rsrp, (-120, -70)),
    ("rsrq", "RSRQ", "dB", evaluate_rsrq, (-25, -5)),
    ("sinr", "SINR", "dB", evaluate_sinr, (-5, 30)),
]


def main():
    print("="*70)
    print("📶 HILINK LTE SIGNAL MONITOR")
    print("="*70)

    try:
        api = HilinkAPI.from_env()
        api.start_session()
    except HilinkError as e:
        print(f"\n❌ Could not start a session: {e}")
        return 1

    print("\n🔄 Press Ctrl+C to stop monitoring")
    print("="*70)

    try:
        while True:
            print("\n" + "="*70)
            print(f"⏰ {time.strftime('%H:%M:%S')}")
            print("="*70)

            try:
                signal = api.signal_info()
            except HilinkError as e:
                print(f"   ❌ Failed to read signal: {e}")
                time.sleep(POLL_INTERVAL_S)
                continue

            print(f"\n📡 Cell {signal.get('cell_id', 'N/A')}  PCI {signal.get('pci', 'N/A')}  "
                  f"Band {signal.get('band', 'N/A')}\n")

            for key, label, unit, evaluate, (low, high) in METRICS:
                value = parse_metric(signal.get(key))
                if value is None:
                    print(f"   {label}: N/A")
                    continue
                quality, emoji = evaluate(value)
                print(f"   {label}: {value:6.1f} {unit:<3}  {emoji} {quality}")
                print(draw_bar(value, low, high))

            time.sleep(POLL_INTERVAL_S)
    except KeyboardInterrupt:
        print("\n\n✅ Monitoring stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
