"""
Rankings ingestion package.

This package handles the rankings pipeline:
1. Scrapes each statistic's paginated ranking table with a headless browser
2. Normalizes tied ranks and writes observations to PostgreSQL in chunks
3. Fans a run out across all statistics and emails a summary
4. Backfills the legacy wide-format table into the rankings table
"""
