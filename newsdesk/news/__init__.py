"""
News Module
===========

News aggregation, including:
- RSS and REST source adapters
- Cleaning, categorization and breaking-news detection
- Near-duplicate merging over a recent window
- Scheduled background ingestion and breaking-news push
- Feed, trending and interaction services for the API
"""
