from pathlib import Path

from invoke import task

DEFAULT_DB = Path("data") / "reputation.duckdb"


@task
def lint(c):
    c.run("ruff check .")


@task
def format_check(c):
    c.run("ruff format --check .")


@task
def test(c):
    c.run("pytest")


@task
def clean_db(c):
    if DEFAULT_DB.exists():
        DEFAULT_DB.unlink()
        print(f"Removed {DEFAULT_DB}")


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)
