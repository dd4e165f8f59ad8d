"""
Quick smoke test, run with: python test_crawl.py [url ...]
Analyzes each URL against a throwaway SQLite file and prints the stored record.
"""

import asyncio
import json
import sys

from pagescan.core import crawl, rerun
from pagescan.errors import PageScanError
from pagescan.store import RecordStore

URLS = [
    "https://example.com/",
    "https://www.python.org/",
    "https://httpbin.org/status/404",
]


def print_record(record):
    print(json.dumps(record.to_dict(), indent=2, default=str))
    print("-" * 80)


async def main(urls):
    store = RecordStore.from_url("sqlite:///smoke_crawl.db")
    store.create_schema()

    ids = []
    for url in urls:
        print(f"\n>>> Analyzing: {url}\n")
        try:
            record = await crawl(url, store)
        except PageScanError as exc:
            print(f"failed: {exc}")
            continue
        ids.append(record.id)
        print_record(record)

    if ids:
        summary = await rerun(ids, store)
        print(f"\n>>> Re-run: {summary.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:] or URLS))
