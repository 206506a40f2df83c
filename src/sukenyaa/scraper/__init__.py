"""Listing fetcher, parser, content filter and search orchestration."""
