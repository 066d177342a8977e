# Services package init
"""
Quotely API — Services Layer
=============================

What:  Business logic between routes (HTTP) and the Store Adapter (persistence).
How:   Each service wraps one StoreAdapter handle and is built per request by
       the providers in quotely.dependencies.

Service Inventory:
    - FavoritesService:   is-favorited, idempotent add/remove, toggle, listing
    - LikeService:        quote like toggle and like counts
    - AggregationService: dashboard counts, user stats, recent and trending quotes
    - QuoteService:       quote catalogue, random quote, submissions
    - ProverbService:     proverb catalogue
    - AuthService:        signup, login, profile read/update
    - ContactService:     contact form and newsletter signups

Services return rows and small result dataclasses; they never build HTTP
responses. Duplicate-key outcomes that callers treat as normal (already
favorited, already subscribed) come back as result values, not exceptions.
"""
