#!/usr/bin/env python3
"""Helper script to check and create .env file for Supabase and Mapbox configuration."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Supabase Configuration (record store and operator authentication)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
CT_SUPABASE_URL=https://your-project-id.supabase.co
CT_SUPABASE_KEY=your-service-role-key-here

# Mapbox geocoding
CT_MAPBOX_TOKEN=your-mapbox-token-here
CT_GEOCODING_COUNTRY=BR
CT_GEOCODING_LANGUAGE=pt

# API Configuration
CT_API_PREFIX=/api
CT_APP_BASE_URL=http://localhost:5173
# CT_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list

# Delivery estimates
CT_AVERAGE_SPEED_KMH=50
"""


def _masked(value: str, head: int = 20) -> str:
    if len(value) > head + 10:
        return value[:head] + "..." + value[-6:]
    return value[:4] + "..."


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Environment Variables Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        print("Creating template .env file...")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase and Mapbox credentials!")
        return

    print(f"✅ Found .env file at: {env_file}")
    print()

    for name in ("CT_SUPABASE_URL", "CT_SUPABASE_KEY", "CT_MAPBOX_TOKEN"):
        value = os.getenv(name)
        if value:
            print(f"✅ {name} (from environment): {_masked(value)}")
        else:
            print(f"ℹ️  {name} not set in environment (may still come from .env)")
    print()

    print("Testing config loading...")
    try:
        sys.path.insert(0, str(project_root / "src"))
        from cement_tracker.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    checks = {
        "Supabase URL": settings.supabase_url,
        "Supabase key": settings.supabase_key,
        "Mapbox token": settings.mapbox_token,
    }
    for label, value in checks.items():
        print(f"{'✅' if value else '❌'} {label}: {_masked(value) if value else 'missing'}")
    print()

    if all(checks.values()):
        print("✅ SUCCESS: record store and geocoding are configured!")
    else:
        print("Troubleshooting:")
        print("1. Make sure .env file exists in project root")
        print("2. Make sure variables start with CT_ prefix")
        print("3. Make sure there are no spaces around = sign")
        print("4. Restart backend after editing .env")


if __name__ == "__main__":
    main()
