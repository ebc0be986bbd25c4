"""
Frog facts: the smallest end-to-end mongoish program.

Run with ``python examples/frog_facts.py``.
"""

import asyncio
import logging

from mongoish import MemoryEngine, MongoishClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main() -> None:
    # The url is only validated, but keeps the switch to a real driver trivial.
    client = MongoishClient("mongodb://localhost")
    client.bind_engine(MemoryEngine)

    async with client:
        frog_facts = client.get_database("animals_facts_db").get_collection("frog_facts")

        await frog_facts.insert_many(
            [
                {"_id": "0", "fact": "There are over 7000 frog and toad species."},
                {"_id": "1", "fact": "Some leap 20 times their body length."},
                {"_id": "2", "fact": "The study of frogs is called Herpetology."},
            ]
        )

        # Facts starting with "T": documents "0" and "2"
        facts = await frog_facts.find({"fact": {"$gte": "T", "$lt": "U"}}).to_list()
        for fact in facts:
            logger.info(f"{fact['_id']}: {fact['fact']}")


if __name__ == "__main__":
    asyncio.run(main())
