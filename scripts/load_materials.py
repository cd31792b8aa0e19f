import asyncio
import json
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from oer_search.api.dependencies import get_search_service


def read_records(path):
    """Yield one raw record per non-empty line of a JSON-lines export."""
    with open(path, encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                print(f"Skipping line {line_no}: {e}")


async def main(path):
    service = get_search_service()
    print(f"Loading materials from {path} into '{service.index.index}'...")
    try:
        result = await service.bulk_index(read_records(path))
    finally:
        await service.index.aclose()
        await service.images.aclose()

    print(
        f"Done: {result.indexed} indexed, {result.failed} failed, "
        f"{result.skipped} skipped."
    )


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: load_materials.py <materials.jsonl>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))
