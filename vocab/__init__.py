"""Vocabulary trainer: catalog, item store and study sessions around the review scheduler."""
