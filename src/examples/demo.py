"""
demo.py – One-shot showcase of chronoset on the configured backend.

Assumes:
  • CHRONOSET_* variables in the environment or a `.env` file
    (defaults to a local SQLite file)
"""

from pprint import pprint

from chronoset import CalendarTopic, MetadataRecord, init_chronoset, on

SCOPE = "DEMO"


@on.created(MetadataRecord)
def log_new_metadata(record: MetadataRecord, notification: dict):
    print(f"\n🆕 Metadata created: {record}")


@on.updated(MetadataRecord)
def log_updated_metadata(record: MetadataRecord, notification: dict):
    print(f"\n✏️  Metadata moved from {notification['extra']} to {record.start}")


@on.deleted(MetadataRecord)
def log_deleted_metadata(record: MetadataRecord, notification: dict):
    print(f"\n🗑  Metadata deleted: {record}")


def main():
    db = init_chronoset()
    MetadataRecord.range_destroy(db, scope=SCOPE, start=0, stop=2**62)

    now = db.now_s()
    first = MetadataRecord(db, scope=SCOPE, start=now - 60, metadata={"run": 1})
    first.create()
    second = MetadataRecord(
        db, scope=SCOPE, start=now + 60, color="#00ff00", metadata={"run": 2}
    )
    second.create()

    print("\nActive right now:")
    pprint(MetadataRecord.get_current_value(db, scope=SCOPE))

    second.update(start=now + 120, color=second.color, metadata={"run": 2, "late": True})
    print("\nEverything in the next five minutes:")
    pprint(MetadataRecord.range(db, scope=SCOPE, start=now, stop=now + 300))

    first.destroy()
    print(f"\nRecords left: {MetadataRecord.count(db, scope=SCOPE)}")

    print("\nCalendar stream:")
    for entry in CalendarTopic.read_entries(db, scope=SCOPE):
        print(f"  {entry['id']}: {entry['kind']} {entry.get('extra', '')}")


if __name__ == "__main__":
    main()
