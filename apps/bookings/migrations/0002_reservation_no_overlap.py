"""PostgreSQL exclusion constraint against overlapping active reservations.

tstzrange(start, "end", '[]') keeps both bounds inclusive, matching the
engine's availability check: a reservation ending when the next one starts
still conflicts. Other database backends rely on the repository re-check.
"""

from django.db import migrations

CONSTRAINT_NAME = "reservation_no_active_overlap"

CREATE_EXTENSION_SQL = "CREATE EXTENSION IF NOT EXISTS btree_gist;"

CREATE_SQL = f"""
ALTER TABLE bookings_reservation
    ADD CONSTRAINT {CONSTRAINT_NAME}
    EXCLUDE USING gist (
        resource_kind WITH =,
        resource_id WITH =,
        tstzrange(start, "end", '[]') WITH &&
    )
    WHERE (status IN ('pending', 'approved'));
"""

DROP_SQL = f"ALTER TABLE bookings_reservation DROP CONSTRAINT IF EXISTS {CONSTRAINT_NAME};"


def add_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(CREATE_EXTENSION_SQL)
    schema_editor.execute(CREATE_SQL)


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(DROP_SQL)


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
