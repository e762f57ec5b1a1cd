"""Interactive console front end for the Sub-One admin backend."""
