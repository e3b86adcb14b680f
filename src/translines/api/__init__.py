"""HTTP interface for translines (FastAPI)."""
