"""Command line interface for RepoLingo."""
