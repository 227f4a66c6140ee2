"""
Migration script to enforce one mood entry per user per date.
Collapses existing duplicates (keeping the most recently updated row),
then adds the unique constraint on mood_entries(user_id, entry_date).
"""
from sqlalchemy import text
from app.db.session import SessionLocal


def migrate():
    """Remove duplicate mood entries and add the (user_id, entry_date) constraint."""
    db = SessionLocal()
    try:
        # Check if constraint already exists
        result = db.execute(text("""
            SELECT COUNT(*) as count
            FROM information_schema.table_constraints
            WHERE table_name = 'mood_entries'
            AND constraint_name = 'uq_mood_entries_user_date'
        """))
        constraint_exists = result.scalar() > 0

        if constraint_exists:
            print("uq_mood_entries_user_date already exists, nothing to do")
            return

        # Keep the newest row of each (user_id, entry_date) group
        deleted = db.execute(text("""
            DELETE FROM mood_entries
            WHERE id IN (
                SELECT id FROM (
                    SELECT
                        id,
                        ROW_NUMBER() OVER (
                            PARTITION BY user_id, entry_date
                            ORDER BY updated_at DESC, created_at DESC, id DESC
                        ) AS rn
                    FROM mood_entries
                ) ranked
                WHERE ranked.rn > 1
            )
        """))
        print(f"Removed {deleted.rowcount} duplicate mood entries")

        db.execute(text("""
            ALTER TABLE mood_entries
            ADD CONSTRAINT uq_mood_entries_user_date UNIQUE (user_id, entry_date)
        """))
        print("Added uq_mood_entries_user_date constraint")

        db.commit()
        print("Migration completed successfully!")
    except Exception as e:
        db.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    migrate()
