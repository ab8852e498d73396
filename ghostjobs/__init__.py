"""Ghost job hunter: scrape, verify, score and list job postings."""
