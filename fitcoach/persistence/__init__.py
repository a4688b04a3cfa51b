"""Persistence gateways for plan/day/exercise rows."""
