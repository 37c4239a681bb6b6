"""
Unit tests for batch building.
"""
from conftest import record
from simple_ddns.batches import Change, UpdateBatch, build_batches
from simple_ddns.records import RecordType
from simple_ddns.zones import ZoneSubscription

ZONE = ZoneSubscription(
    zone_id="1111111111111111111111",
    records=(
        ("www.local-environment.com", RecordType.A),
        ("jenkins.local-environment.com", RecordType.A),
        ("www6.local-environment.com", RecordType.AAAA),
        ("jenkins6.local-environment.com", RecordType.AAAA),
    ),
)


class TestBuildBatches:

    def test_changes_grouped_by_zone(self):
        changed = [
            record("www6.local-environment.com", "AAAA", "2001:db8::6"),
            record("jenkins.local-environment.com", "A", "10.0.0.2"),
        ]

        batches = build_batches(changed, [ZONE])

        assert batches == [
            UpdateBatch(zone_id="1111111111111111111111", changes=(
                Change("jenkins.local-environment.com", RecordType.A, "10.0.0.2", 300),
                Change("www6.local-environment.com", RecordType.AAAA, "2001:db8::6", 300),
            ))
        ]

    def test_unmatched_zone_produces_no_batch(self):
        zone = ZoneSubscription("Z1", (("a.example.com", RecordType.A), ("b.example.com", RecordType.AAAA)))

        assert build_batches([record("c.example.com", "A", "10.0.0.1")], [zone]) == []

    def test_no_changes_no_batches(self):
        assert build_batches([], [ZONE]) == []

    def test_only_matching_zones_emitted(self):
        zones = [
            ZoneSubscription("Z1", (("a.example.com", RecordType.A),)),
            ZoneSubscription("Z2", (("b.example.com", RecordType.A),)),
            ZoneSubscription("Z3", (("a.example.com", RecordType.A), ("c.example.com", RecordType.A))),
        ]

        batches = build_batches([record("a.example.com", "A", "10.0.0.1")], zones)

        assert [batch.zone_id for batch in batches] == ["Z1", "Z3"]
        assert all(len(batch.changes) == 1 for batch in batches)

    def test_match_requires_same_record_type(self):
        zone = ZoneSubscription("Z1", (("home.example.com", RecordType.AAAA),))

        assert build_batches([record("home.example.com", "A", "10.0.0.1")], [zone]) == []

    def test_no_prefix_or_suffix_matching(self):
        zone = ZoneSubscription("Z1", (("example.com", RecordType.A),))

        assert build_batches([record("www.example.com", "A", "10.0.0.1")], [zone]) == []

    def test_same_input_same_output(self):
        changed = [
            record("www.local-environment.com", "A", "10.0.0.1"),
            record("jenkins6.local-environment.com", "AAAA", "::1"),
        ]

        assert build_batches(changed, [ZONE]) == build_batches(changed, [ZONE])


class TestWireFormat:

    def test_change_batch_payload(self):
        batch = UpdateBatch("Z1", (Change("home.example.com", RecordType.A, "10.0.0.2"),))

        assert batch.to_change_batch() == {
            "Comment": "changes for zone id Z1",
            "Changes": [{
                "Action": "UPSERT",
                "ResourceRecordSet": {
                    "Name": "home.example.com",
                    "Type": "A",
                    "TTL": 300,
                    "ResourceRecords": [{"Value": "10.0.0.2"}],
                },
            }],
        }
