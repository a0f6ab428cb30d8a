"""
Example: Shorten links
Description: Shorten one URL, then a batch of URLs in parallel
Use case: Learning the basics, quick testing

This example demonstrates:
- Client setup from an access token
- Single calls return one record and raise on failure
- List calls return records in input order, errors in place
"""

import asyncio
import os

from dotenv import load_dotenv

from bitlinks import ApiError, BitlyClient, BitlyTimeout

load_dotenv()


async def main() -> None:
    # 1. Configure the client (BITLY_ACCESS_TOKEN from .env)
    async with BitlyClient(access_token=os.getenv("BITLY_ACCESS_TOKEN")) as client:
        # 2. A single URL gives a single record
        try:
            record = await client.shorten("https://www.python.org/")
            print(f"{record.long_url} -> {record.short_url}")
        except (BitlyTimeout, ApiError) as e:
            print(f"Could not shorten: {e}")

        # 3. A list is sent concurrently and keeps its order
        records = await client.shorten(
            [
                "https://docs.python.org/3/library/asyncio.html",
                "https://docs.aiohttp.org/",
                "https://loguru.readthedocs.io/",
            ]
        )
        for record in records:
            if record.ok:
                print(f"{record.long_url} -> {record.short_url}")
            else:
                print(f"{record.long_url}: {record.error} ({record.code})")


if __name__ == "__main__":
    asyncio.run(main())
