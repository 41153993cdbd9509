"""Loyalty tiers and the discount each tier grants on vehicle rental."""
