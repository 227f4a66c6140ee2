"""
Run schema migrations against an existing database.
"""
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.db.migrations import add_mood_entry_unique_constraint

MIGRATIONS = [
    add_mood_entry_unique_constraint,
]


def main():
    for migration in MIGRATIONS:
        name = migration.__name__.rsplit(".", 1)[-1]
        print(f"Running {name}...")
        migration.migrate()
    print(f"Applied {len(MIGRATIONS)} migration(s)")


if __name__ == "__main__":
    main()
