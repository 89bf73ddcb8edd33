"""Callback example: start several previews, cancel one, print the rest."""

import asyncio

from linkpreview import LinkPreview

MESSAGES = [
    "docs at https://docs.python.org/3/library/asyncio.html",
    "www.wikipedia.org is handy",
    "this one gets cancelled: https://example.com/",
    "and this has no link at all",
]


async def main():
    done = asyncio.Event()
    pending = len(MESSAGES) - 1  # one is cancelled and never answers

    def finish():
        nonlocal pending
        pending -= 1
        if pending == 0:
            done.set()

    def on_success(data: dict):
        print(f"OK    {data['url']} -> {data.get('title')!r}")
        finish()

    def on_error(error: dict):
        print(f"ERROR {error['code']}: {error['description']}")
        finish()

    async with LinkPreview() as lp:
        handles = [lp.preview_link(text, on_success, on_error) for text in MESSAGES]
        handles[2].cancel()
        await asyncio.wait_for(done.wait(), timeout=30)


asyncio.run(main())
