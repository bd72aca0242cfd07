"""Routers FastAPI : pages, submissions, analytics, page builder."""
