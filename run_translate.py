# run_translate.py
import asyncio
import sys
from pathlib import Path

# Make the repo root importable (same as before)
repo_root = Path(__file__).resolve().parent
if str(repo_root) not in sys.path:
    sys.path.append(str(repo_root))

from core.config import settings
from core.logging_utils import setup_logging
from services.factory import build_services
from services.orchestrator import Done

DEFAULT_URL = "https://en.wikipedia.org/wiki/Renaissance"


async def main(url: str) -> int:
    setup_logging(settings.LOG_LEVEL)
    services = build_services(settings)
    try:
        outcome = await services.orchestrator.run(url)
    finally:
        await services.aclose()

    print("\n=== TRANSLATE SUMMARY ===")
    if not isinstance(outcome, Done):
        print(f"Failed ({outcome.phase or 'unknown phase'}): {outcome.error}")
        return 1

    print(f"Title     : {outcome.title}")
    print(f"Source    : {outcome.source_url}")
    for key, value in outcome.debug.items():
        print(f"{key:<10}: {value}")
    print("\nFirst 500 chars of HTML:")
    print(outcome.content_html[:500])
    return 0


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL
    sys.exit(asyncio.run(main(target)))
