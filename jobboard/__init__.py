"""ESG job board: relevance classification, sponsor matching and scoring."""
