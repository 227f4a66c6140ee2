"""
Create the Equilibrius tables. Run once against a fresh database:

    python -m app.db.init_db
"""
from app.db.session import engine, init_db

if __name__ == "__main__":
    print(f"Creating tables on {engine.url.render_as_string(hide_password=True)}...")
    init_db()
    print("Database initialized successfully!")
