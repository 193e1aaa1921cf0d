"""CLI entry point for RepoLingo."""

from cli.commands.main import cli

if __name__ == "__main__":
    cli()
