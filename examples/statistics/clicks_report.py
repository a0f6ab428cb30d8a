"""
Example: Click report
Description: Summaries, daily series, referrers and countries for a set of bitlinks
Use case: Periodic reporting on campaign links

This example demonstrates:
- Batch click summaries with a progress bar
- Click series with unit/units query options
- Referrers for a single link
"""

import asyncio
import os

from dotenv import load_dotenv

from bitlinks import BitlyClient, ClientConfig

load_dotenv()

BITLINKS = [
    "bit.ly/39graKZ",
    "https://bit.ly/3abcdEF",
]


async def main() -> None:
    config = ClientConfig.from_env(show_progress=True, logging_level=20)

    async with BitlyClient(os.getenv("BITLY_ACCESS_TOKEN"), config=config) as client:
        summaries = await client.clicks_summary(BITLINKS, unit="day", units=30)
        for summary in summaries:
            print(f"{summary.short_url}: {summary.user_clicks} clicks in 30 days")

        series = await client.clicks(BITLINKS, unit="day", units=7)
        for record in series:
            for point in record.link_clicks or ():
                print(f"{record.short_url} {point.date[:10]} {point.clicks}")

        for referrer in await client.referrers(BITLINKS[0]):
            print(f"{referrer.referrer}: {referrer.clicks}")

        for country in await client.countries(BITLINKS[0], unit="day", units=30):
            print(f"{country.country}: {country.clicks}")


if __name__ == "__main__":
    asyncio.run(main())
