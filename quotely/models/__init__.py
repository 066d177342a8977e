"""
Quotely API — ORM Models
=========================

Importing this package registers every table on `Base.metadata`, which is
what Alembic autogenerate and `create_schema()` read.
"""

from quotely.models.favorite import Favorite, ITEM_TYPES
from quotely.models.proverb import Proverb
from quotely.models.quote import Quote, QuoteLike
from quotely.models.submission import ContactSubmission, NewsletterSubscriber
from quotely.models.user import User

__all__ = [
    "ContactSubmission",
    "Favorite",
    "ITEM_TYPES",
    "NewsletterSubscriber",
    "Proverb",
    "Quote",
    "QuoteLike",
    "User",
]
