#!/usr/bin/env python
"""
Check pipeline - loads the service catalog and runs the test suite.

Usage:
    python scripts/check_catalog.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from bundle_pricing.config.settings import get_settings
from bundle_pricing.data.catalog import load_services
from bundle_pricing.engine.currency import format_minor, to_minor


def main():
    settings = get_settings()

    print("=" * 60)
    print("BUNDLE PRICING CHECK PIPELINE")
    print("=" * 60)
    print()

    print(f"[1/2] Loading service catalog from {settings.services_csv}...")
    try:
        services = load_services()
    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ CATALOG FAILED\n  ERROR: {e}")
        sys.exit(1)

    for s in services:
        print(f"  {s.id:>4}  {s.name:<30} {format_minor(to_minor(s.price, s.currency), s.currency):>10}  {s.duration}m")

    print()
    print("[2/2] Running tests...")
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)
    print(f"  Services: {len(services)}")
    print(f"  Currency: {settings.currency.upper()}")


if __name__ == "__main__":
    main()
