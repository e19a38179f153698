"""Registration page scraper producing the Schema Document."""
