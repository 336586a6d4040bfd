"""Sugarflow: Jira ticket to GitHub pull request workflow for a local repository."""

__version__ = "0.1.0"
