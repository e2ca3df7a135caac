"""
Seed the quotes table with a starter set of motivational quotes.

Quotes already present (same text and author) are skipped, so the script can
be re-run safely. --clear deletes every quote first (favorites and view
history pointing at them go too).

Usage (from the project root, with .env configured):
    python scripts/seed-quotes.py
    python scripts/seed-quotes.py --clear

Requires: database reachable, migrations applied (alembic upgrade head).
"""

import argparse
import os
import sys
from pathlib import Path

# .env must be loaded before importing quotes_api (session reads DATABASE_URL)
root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root))
os.chdir(root)

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import delete, select

from quotes_api.database.models.favorite import Favorite
from quotes_api.database.models.quote import Quote
from quotes_api.database.models.quote_view import QuoteView
from quotes_api.database.session import get_session


SAMPLE_QUOTES = [
    {
        "text": "The only way to do great work is to love what you do.",
        "author": "Steve Jobs",
        "tags": ["inspiration", "work", "passion"],
    },
    {
        "text": "Life is what happens when you're busy making other plans.",
        "author": "John Lennon",
        "tags": ["life", "planning"],
    },
    {
        "text": "The future belongs to those who believe in the beauty of their dreams.",
        "author": "Eleanor Roosevelt",
        "tags": ["future", "dreams", "belief"],
    },
    {
        "text": "Success is not final, failure is not fatal: It is the courage to continue that counts.",
        "author": "Winston Churchill",
        "tags": ["success", "failure", "courage"],
    },
    {
        "text": "In the middle of difficulty lies opportunity.",
        "author": "Albert Einstein",
        "tags": ["opportunity", "difficulty", "challenge"],
    },
    {
        "text": "Believe you can and you're halfway there.",
        "author": "Theodore Roosevelt",
        "tags": ["belief", "confidence"],
    },
    {
        "text": "The best way to predict the future is to create it.",
        "author": "Peter Drucker",
        "tags": ["future", "creation"],
    },
    {
        "text": "It does not matter how slowly you go as long as you do not stop.",
        "author": "Confucius",
        "tags": ["perseverance", "progress"],
    },
    {
        "text": "Everything you've ever wanted is on the other side of fear.",
        "author": "George Addair",
        "tags": ["fear", "desire", "courage"],
    },
    {
        "text": "The only limit to our realization of tomorrow will be our doubts of today.",
        "author": "Franklin D. Roosevelt",
        "tags": ["doubt", "limitation", "future"],
    },
]


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed sample motivational quotes")
    ap.add_argument("--clear", action="store_true", help="Delete all existing quotes first")
    args = ap.parse_args()

    with get_session() as session:
        if args.clear:
            session.execute(delete(Favorite))
            session.execute(delete(QuoteView))
            removed = 0
            for quote in session.scalars(select(Quote)).all():
                session.delete(quote)
                removed += 1
            session.flush()
            print(f"  Cleared {removed} existing quotes")

        inserted = 0
        for item in SAMPLE_QUOTES:
            exists = session.scalar(
                select(Quote.id).where(Quote.text == item["text"], Quote.author == item["author"])
            )
            if exists:
                print(f"  Already present: {item['author']} (id={exists})")
                continue
            session.add(Quote(text=item["text"], author=item["author"], tags=item["tags"], views=0))
            inserted += 1

    print(f"\nSeed done: {inserted} quotes inserted.")


if __name__ == "__main__":
    main()
