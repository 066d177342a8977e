# Routes package init
"""
Quotely API — API Routes Package
=================================

What:  HTTP route handlers that accept requests and return JSON envelopes.

Route Inventory:
    - health.py:     GET  /, GET /health
    - auth.py:       /api/auth/{signup,login,me}, /api/user/profile
    - quotes.py:     /api/quotes (list, random, detail, submit, like)
    - proverbs.py:   GET  /api/proverbs, /api/proverbs/random
    - favorites.py:  /api/favorites (list, add, toggle, remove, check)
    - dashboard.py:  GET  /api/dashboard, /api/dashboard/trending
    - contact.py:    POST /api/contact, /api/newsletter/subscribe

Design Principle:
    Routes are THIN. They parse the request, call one service method and
    wrap the result in a response model. Errors propagate as exceptions to
    the global handlers in main.py.
"""
