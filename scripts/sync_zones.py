#!/usr/bin/env python
"""
Zone sync - creates price tables for inventory municipalities that lack one.

Usage:
    python scripts/sync_zones.py            # sync sizes, then zones
    python scripts/sync_zones.py --dry-run  # report what would be created
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from billboard_pricing.config.logging_config import configure_logging
from billboard_pricing.config.settings import get_settings
from billboard_pricing.engine.errors import ExternalIOFailure
from billboard_pricing.services.system import PricingSystem


async def run(dry_run: bool) -> int:
    settings = get_settings()
    system = await PricingSystem.load(settings)

    print("=" * 60)
    print("BILLBOARD PRICING ZONE SYNC")
    print("=" * 60)
    print(f"  Inventory: {settings.inventory_file or '(not configured)'}")
    print(f"  Document:  {settings.pricing_document}")
    print()

    if dry_run:
        print("[1/1] Analyzing inventory...")
        report = await system.reconciler.analyze()
    else:
        print("[1/2] Syncing sizes...")
        sizes = await system.reconciler.sync_sizes()
        print(f"  Sizes found: {len(sizes.sizes_found)}, added: {len(sizes.sizes_added)}")
        for size in sizes.invalid_sizes:
            print(f"  WARNING: ignored invalid size '{size}'")
        print()
        print("[2/2] Syncing zones...")
        report = await system.reconciler.run()

    print()
    print("=" * 60)
    print("✅ SYNC COMPLETE" if not report.errors else "⚠️ SYNC COMPLETE WITH ERRORS")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Municipalities: {report.total_municipalities}")
    print(f"  Already priced: {len(report.existing_zone_names)}")
    print(f"  Missing: {', '.join(report.missing_zone_names) or '-'}")
    if not dry_run:
        print(f"  Created: {', '.join(report.newly_created_zone_names) or '-'}")
    for error in report.errors:
        print(f"  ERROR: {error}")
    return 1 if report.errors else 0


def main():
    parser = argparse.ArgumentParser(description="Create pricing zones for new inventory municipalities")
    parser.add_argument('--dry-run', action='store_true', help="Only report missing zones")
    args = parser.parse_args()

    configure_logging()
    try:
        exit_code = asyncio.run(run(args.dry_run))
    except ExternalIOFailure as e:
        print(f"\n❌ SYNC FAILED: {e}")
        sys.exit(2)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
