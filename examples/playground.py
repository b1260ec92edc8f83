import asyncio
import logging
import os
import tempfile
from pathlib import Path

from sugar_client import ClientOptions, SugarClient

logging.basicConfig(level=logging.INFO)


async def main():
    async with SugarClient(
        os.environ.get("SUGAR_URL", "http://localhost/rest/v10"),
        ClientOptions(raise_errors=True),
    ) as client:
        client.set_credentials(
            os.environ.get("SUGAR_USERNAME", "admin"),
            os.environ.get("SUGAR_PASSWORD", "admin"),
        )

        # CRUD
        account = await client.records.create("Accounts", {"name": "Acme"})
        print("Created:", account["id"])

        await client.records.update("Accounts", account["id"], {"industry": "Energy"})
        print("Retrieved:", await client.records.retrieve("Accounts", account["id"]))

        found = await client.records.search("Accounts", {"q": "Acme", "max_num": 5})
        print("Search:", [r["name"] for r in found["records"]])

        # Relationships
        contact = await client.records.create("Contacts", {"last_name": "Smith"})
        await client.relationships.relate(
            "Accounts", account["id"], "contacts", contact["id"]
        )
        print("Related:", await client.relationships.related(
            "Accounts", account["id"], "contacts"
        ))

        # Files
        note = await client.records.create("Notes", {"name": "Spec sheet"})
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "sheet.txt"
            source.write_text("hello")
            await client.files.upload(
                "Notes", note["id"], "filename", source, {"format": "sugar-html-json"}
            )
            copy = await client.files.download(
                "Notes", note["id"], "filename", Path(tmp) / "copy.txt"
            )
            print("Downloaded:", copy.read_text())

        # Escape hatch
        print("Me:", await client.call("me"))

        await client.records.delete("Accounts", account["id"])

asyncio.run(main())
