"""Scripted semantic-version releases: test, bump, commit, tag, push."""
