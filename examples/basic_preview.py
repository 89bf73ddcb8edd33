"""Basic preview example: turn a chat message into a link preview."""

import asyncio

from linkpreview import LinkPreview, PreviewError


async def main():
    async with LinkPreview() as lp:
        # The first URL in the text is used; shorteners are followed to the real page
        try:
            result = await lp.get_preview("Have you seen this? https://www.python.org/about/ so good")
        except PreviewError as e:
            print(f"Preview failed ({int(e.code)}): {e.description}")
            return

        print(f"URL:           {result.url}")
        print(f"Final URL:     {result.final_url}")
        print(f"Canonical URL: {result.canonical_url}")
        print(f"Title:         {result.title}")
        print(f"Description:   {(result.description or '')[:120]}")
        print(f"Icon:          {result.icon}")
        print(f"Images ({len(result.images or [])} found):")
        for image in (result.images or [])[:5]:
            print(f"  {image}")


asyncio.run(main())
