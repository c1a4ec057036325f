"""
FastAPI routers for all API endpoints.

Each module defines a router for one domain (transactions, budgets, dashboard, etc.).
Authenticated routers build an RLS-scoped Supabase client from the caller's token.
"""
