#!/usr/bin/env python3
"""
RewardBin Backend Runner
========================

Usage:
    python run_app.py                    # Development mode with auto-reload
    python run_app.py --mode prod        # Production mode
    python run_app.py --port 8001        # Custom port
    python run_app.py --host 127.0.0.1   # Custom host
    python run_app.py --init-db          # Create tables and exit
"""

import argparse
import asyncio
import os
import sys


def check_environment():
    """Check if environment is properly set up"""
    print("\n🔍 Checking environment...")

    if os.path.exists(".env"):
        print("✅ .env file found")
    else:
        print("⚠️  .env file not found, using process environment")

    if not os.environ.get("SECRET_KEY") and not os.path.exists(".env"):
        print("❌ SECRET_KEY is not set")
        return False

    return True


async def init_db():
    """Create all tables for the configured database"""
    from rewardbin.core.config import get_settings
    from rewardbin.core.database import Database

    database = Database(get_settings())
    try:
        await database.create_all()
    finally:
        await database.dispose()


def run_main_app(host="0.0.0.0", port=8000, reload=True, workers=1):
    """Run the FastAPI application"""
    print(f"\n🚀 Starting RewardBin API on {host}:{port}")
    print(f"📖 API Docs: http://{host}:{port}/api/docs")
    print("\n" + "=" * 50)

    import uvicorn
    uvicorn.run(
        "rewardbin.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_level="info"
    )


def main():
    parser = argparse.ArgumentParser(description="RewardBin Backend Runner")
    parser.add_argument("--mode", choices=["dev", "prod"], default="dev", help="Server mode (default: dev)")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes in prod mode")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    parser.add_argument("--init-db", action="store_true", help="Create database tables and exit")

    args = parser.parse_args()

    if not check_environment():
        return 1

    if args.init_db:
        asyncio.run(init_db())
        print("✅ Database tables created")
        return 0

    reload = not args.no_reload and args.mode != "prod"
    run_main_app(args.host, args.port, reload, args.workers)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)
