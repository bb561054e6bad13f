"""HackEM News: engineering-management reading list from Hacker News and Reddit."""

__version__ = "1.0.0"
