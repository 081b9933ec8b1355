"""Script to sync the vault into the Supabase index."""

import asyncio
import sys
from pathlib import Path

# Add the parent directory to the path so we can import from app
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings
from app.services.indexing import run_vault_sync
from app.utils.errors import ConfigurationError


async def main() -> int:
    """Main entry point."""
    print(f"Syncing vault at '{settings.VAULT_DIR}'...")
    try:
        result = await run_vault_sync()
    except ConfigurationError as e:
        print(f"Missing API variables: {e}")
        return 2
    except FileNotFoundError as e:
        print(str(e))
        return 1

    print("=" * 50)
    print(f"Up to date: {result.success_count}")
    print(f"Updated:    {result.updated_count}")
    print(f"Deleted:    {result.delete_count}")
    print(f"Errors:     {result.error_count}")
    print(f"Elapsed:    {result.elapsed_seconds:.2f}s")
    print("=" * 50)

    if result.error_count:
        print("There were errors! See logs/sync.log for more information.")
        return 1
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
