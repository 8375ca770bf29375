"""linkfolio - OAuth login, account linking and profiles for a link-in-bio portfolio."""

__version__ = "0.1.0"
